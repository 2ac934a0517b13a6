#!/usr/bin/env python3
"""pdfxml_server: Serves the PDF-to-XML conversion API with waitress."""

import argparse
import logging
import os
import sys

from waitress import serve

from pdfxml_web.app import APP_DIR, create_app
from core.log_utils import setup_logging

log = logging.getLogger("pdfxml_web")


def parse_arguments(args=None):
    parser = argparse.ArgumentParser(description="pdfxml conversion server.")
    g_srv = parser.add_argument_group("Server")
    g_srv.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    g_srv.add_argument("--port", type=int, default=5000, help="Port to listen on.")
    g_srv.add_argument(
        "--database", metavar="FILE", help=f"SQLite database. Default: {APP_DIR}/pdfxml.db"
    )
    g_srv.add_argument(
        "--config", metavar="FILE", help=f"Settings file. Default: {APP_DIR}/pdfxml.cfg"
    )
    g_srv.add_argument(
        "--threads", type=int, default=4, help="Worker threads; each handles one upload."
    )

    g_log = parser.add_argument_group("Logging")
    g_log.add_argument("-v", "--verbose", action="store_true", help="Log progress (INFO).")
    g_log.add_argument("--color-logs", action="store_true", help="Colorize log output.")
    g_log.add_argument("--log-file", metavar="FILE", help="Also write logs to this file.")
    g_log.add_argument(
        "-d",
        "--debug",
        dest="debug_topics",
        metavar="TOPICS",
        help="DEBUG logging for topic prefixes, web and engine "
        "(all,api,app,storage,config,layout,structure,xml,backend,convert).",
    )
    return parser.parse_args(args)


def main():
    """Parses arguments, builds the app and serves it until interrupted."""
    args = parse_arguments()
    os.makedirs(APP_DIR, exist_ok=True)
    setup_logging(
        project_name="pdfxml_web",
        level=logging.INFO if args.verbose else logging.WARNING,
        color_logs=args.color_logs,
        debug_topics=args.debug_topics,
        include_projects=["pdfxml"],
        log_file=args.log_file,
    )

    overrides = {}
    if args.database:
        overrides["DATABASE"] = args.database
    if args.config:
        overrides["CONFIG_PATH"] = args.config
    try:
        app = create_app(overrides)
    except Exception as e:
        log.critical("Could not start pdfxml: %s", e, exc_info=True)
        sys.exit(1)

    log.info("Serving on http://%s:%d", args.host, args.port)
    try:
        serve(app, host=args.host, port=args.port, threads=args.threads, channel_timeout=600)
    except KeyboardInterrupt:
        log.info("Server stopped.")


if __name__ == "__main__":
    main()
