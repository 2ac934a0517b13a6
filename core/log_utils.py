#!/usr/bin/env python3
"""
core/log_utils.py: Logging shared by the pdfxml converter and its web server.

Every component logs to a '<project>.<topic>' logger (pdfxml.layout,
pdfxml_web.storage, ...). setup_logging() installs the handlers once per
process and can raise chosen topics to DEBUG from a comma-separated list of
topic prefixes, so '-d struct' turns on pdfxml.structure only.
"""

import logging

PROJECT_TOPICS = {
    "pdfxml": {"layout", "structure", "xml", "backend", "convert"},
    "pdfxml_web": {"api", "app", "storage", "config"},
}

# Third-party loggers that only matter when they fail.
QUIET_LOGGERS = ("pdfminer", "werkzeug", "waitress")


def setup_logging(
    project_name: str,
    level=logging.INFO,
    color_logs=False,
    debug_topics=None,
    include_projects: list[str] = None,
    log_file: str = None,
):
    """
    Replaces the root logger's handlers with a console handler and, if
    log_file is given, an uncolored file handler.
    Returns:
        list[str]: The logger names raised to DEBUG.
    """
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setFormatter(RichLogFormatter(use_color=color_logs))
    root.addHandler(console)
    root.setLevel(level)
    if log_file:
        _add_file_handler(root, log_file, project_name)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if not debug_topics:
        return []
    return enable_debug_topics(debug_topics, [project_name] + (include_projects or []))


def _add_file_handler(root, log_file, project_name):
    log = logging.getLogger(project_name)
    try:
        handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
    except OSError as e:
        log.error("Could not open log file %s: %s", log_file, e)
        return
    handler.setFormatter(RichLogFormatter(use_color=False))
    root.addHandler(handler)
    log.info("Logging to file: %s", log_file)


def enable_debug_topics(debug_topics: str, projects: list[str]) -> list[str]:
    """Sets DEBUG on every '<project>.<topic>' logger matching a topic prefix."""
    wanted = [t.strip() for t in debug_topics.split(",") if t.strip()]
    enabled = []
    for project in projects:
        known = PROJECT_TOPICS.get(project, set())
        if "all" in wanted:
            matched = known
        else:
            matched = {topic for topic in known if any(topic.startswith(w) for w in wanted)}
        for topic in sorted(matched):
            name = f"{project}.{topic}"
            logging.getLogger(name).setLevel(logging.DEBUG)
            enabled.append(name)
    return enabled


class ContextFilter(logging.Filter):
    """Stamps records with a context string, usually the file being converted."""

    def __init__(self, context_str=""):
        super().__init__()
        self.context_str = context_str

    def filter(self, record):
        record.context = self.context_str
        return True


class RichLogFormatter(logging.Formatter):
    """
    Renders 'LEVEL:topic    [context]: message' with the level and topic in
    fixed-width columns. Multi-line messages and tracebacks repeat the prefix
    on each line so they stay greppable.
    Args:
        use_color (bool): Wrap the level in ANSI colors and bold the topic.
    """

    LEVEL_COLORS = {
        logging.DEBUG: "\033[38;5;245m",
        logging.INFO: "\033[38;5;75m",
        logging.WARNING: "\033[38;5;220m",
        logging.ERROR: "\033[38;5;203m",
        logging.CRITICAL: "\033[1;38;5;197m",
    }
    TOPIC_WIDTH = 9

    def __init__(self, use_color=False):
        super().__init__()
        self.use_color = use_color

    def _topic(self, record):
        """The logger name minus its project, e.g. 'structure' for pdfxml.structure."""
        _, _, topic = record.name.partition(".")
        return (topic.split(".")[0] or record.name)[: self.TOPIC_WIDTH]

    def _prefix(self, record):
        level = f"{record.levelname[:5]:<5}"
        topic = f"{self._topic(record):<{self.TOPIC_WIDTH}}"
        if self.use_color:
            level = f"{self.LEVEL_COLORS.get(record.levelno, '')}{level}\033[0m"
            topic = f"\033[1m{topic}\033[0m"
        context = getattr(record, "context", "")
        return f"{level}:{topic}{f'[{context}]' if context else ''}: "

    def format(self, record):
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        prefix = self._prefix(record)
        return "\n".join(prefix + line for line in message.split("\n"))
