# --- pdfxml_web/services/config_service.py ---
import configparser
import logging

log = logging.getLogger("pdfxml_web.config")

DEFAULT_SETTINGS = {
    "Conversion": {
        "skip_bad_pages": "false",
        "max_upload_mb": "25",
    },
}


class ConfigService:
    """
    Reads and writes the server's pdfxml.cfg INI file. Missing keys fall back
    to DEFAULT_SETTINGS, and a missing file is created from them on first read.
    """

    def __init__(self, config_path: str):
        self.config_path = config_path

    def _load(self) -> configparser.ConfigParser:
        config = configparser.ConfigParser()
        config.read_dict(DEFAULT_SETTINGS)
        if not config.read(self.config_path, encoding="utf-8"):
            log.info("No settings at %s, writing defaults.", self.config_path)
            self.save_settings(DEFAULT_SETTINGS)
        return config

    def get_settings(self) -> dict:
        """All sections as plain string dictionaries."""
        config = self._load()
        return {section: dict(config[section]) for section in config.sections()}

    def save_settings(self, settings: dict):
        """Writes the given sections. Values are stored as strings."""
        config = configparser.ConfigParser()
        for section, values in settings.items():
            config[section] = {k: str(v) for k, v in values.items()}
        try:
            with open(self.config_path, "w", encoding="utf-8") as f:
                config.write(f)
        except OSError as e:
            log.error("Could not save settings to %s: %s", self.config_path, e)
            return
        log.debug("Settings saved to %s.", self.config_path)

    def get_conversion_options(self) -> dict:
        """The [Conversion] section as typed values; bad values use the defaults."""
        section = self._load()["Conversion"]
        defaults = configparser.ConfigParser()
        defaults.read_dict(DEFAULT_SETTINGS)
        options = {}
        for key, getter in (("skip_bad_pages", "getboolean"), ("max_upload_mb", "getint")):
            try:
                options[key] = getattr(section, getter)(key)
            except ValueError:
                log.warning("Invalid %s in %s, using the default.", key, self.config_path)
                options[key] = getattr(defaults["Conversion"], getter)(key)
        return options
