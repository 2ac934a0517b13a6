#!/usr/bin/env python3
"""
pdfxml: Converts a PDF file into a structured XML document.

The heavy lifting (line grouping, heading and paragraph detection, XML
serialization) is done by pdfxml_lib; this script handles arguments, logging,
output files and a short structure summary in the terminal.
"""

import argparse
import logging
import os
import sys
import time
import xml.etree.ElementTree as ET

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from pdfxml_lib.api import convert_file
from pdfxml_lib.errors import ConversionError
from pdfxml_lib.serializer import pretty_print, xml_file_name
from core.log_utils import ContextFilter, setup_logging


class CustomHelpFormatter(
    argparse.ArgumentDefaultsHelpFormatter, argparse.RawTextHelpFormatter
):
    """Shows defaults and keeps the epilog's line breaks."""


class Application:
    """Runs one conversion based on command-line arguments."""

    DEFAULT_FILENAME_SENTINEL = "__DEFAULT_FILENAME__"

    def __init__(self, args):
        self.args = args
        self.stats = {}
        self.console = Console(
            theme=Theme({"table.header": "bold sky_blue2", "error": "bold red"})
        )

    def run(self):
        """Main entry point for the application logic. Returns the exit code."""
        self.stats["start_time"] = time.monotonic()
        setup_logging(
            project_name="pdfxml",
            level=logging.INFO if self.args.verbose else logging.WARNING,
            color_logs=self.args.color_logs,
            debug_topics=self.args.debug_topics,
            log_file=self.args.log_file,
        )
        context = ContextFilter(os.path.basename(self.args.pdf_file))
        for handler in logging.getLogger().handlers:
            handler.addFilter(context)

        try:
            result = convert_file(
                self.args.pdf_file,
                skip_bad_pages=self.args.skip_bad_pages,
                xsd_schema=self.args.schema,
            )
        except ConversionError as e:
            self.console.print(f"[error]Error:[/error] {e.message}")
            return 1
        self.stats["duration"] = time.monotonic() - self.stats["start_time"]

        xml = pretty_print(result.xml) if self.args.pretty else result.xml
        if not self.args.dry_run:
            self._save_output(xml)
        self._display_summary(result)
        return 0

    def _resolve_output_filename(self):
        """Uses the PDF's name with an .xml extension unless a name was given."""
        if self.args.output_file in (None, self.DEFAULT_FILENAME_SENTINEL):
            directory = os.path.dirname(self.args.pdf_file)
            return os.path.join(directory, xml_file_name(self.args.pdf_file))
        return self.args.output_file

    def _save_output(self, xml):
        if self.args.output_file == "-":
            sys.stdout.write(xml + "\n")
            return
        path = self._resolve_output_filename()
        with open(path, "w", encoding="utf-8") as f:
            f.write(xml)
        logging.getLogger("pdfxml").info("XML written to %s", path)
        self.stats["output_file"] = path

    def _display_summary(self, result):
        """Prints per-page header and paragraph counts read back from the XML."""
        root = ET.fromstring(result.xml)
        name = os.path.basename(self.args.pdf_file)
        table = Table(title=f"{name}: {result.page_count} page(s)")
        table.add_column("Page", justify="right")
        table.add_column("H1", justify="right")
        table.add_column("H2", justify="right")
        table.add_column("Paragraphs", justify="right")
        table.add_column("Characters", justify="right")
        for page in root.iter("page"):
            raw = page.findtext("rawContent") or ""
            table.add_row(
                page.get("number"),
                str(len(page.findall("headers/h1"))),
                str(len(page.findall("headers/h2"))),
                str(len(page.findall("paragraphs/p"))),
                f"{len(raw):,}",
            )
        # Keep stdout clean when the XML itself goes there.
        console = Console(stderr=True) if self.args.output_file == "-" else self.console
        console.print(table)
        if "output_file" in self.stats:
            console.print(f"Saved to {self.stats['output_file']}")
        console.print(f"Done in {self.stats['duration']:.2f}s")

    @staticmethod
    def parse_arguments(args=None):
        """Builds the argument parser and parses args (sys.argv when None)."""
        parser = argparse.ArgumentParser(
            description="Convert a PDF into structured XML (headings, paragraphs, page text).",
            formatter_class=CustomHelpFormatter,
            add_help=False,
            epilog=(
                "\nExamples:\n"
                "  python pdfxml.py report.pdf\n"
                '  python pdfxml.py report.pdf -o "out/report.xml" --pretty\n'
                "  python pdfxml.py report.pdf -o - > report.xml\n"
                "  python pdfxml.py report.pdf -D -d structure,layout --color-logs"
            ),
        )

        g_in = parser.add_argument_group("Input")
        g_in.add_argument("pdf_file", help="The PDF to convert.")
        g_in.add_argument("-h", "--help", action="help", help="Show this help and exit.")

        g_conv = parser.add_argument_group("Conversion")
        g_conv.add_argument(
            "--skip-bad-pages",
            action="store_true",
            help="Emit empty pages for unreadable pages instead of failing.",
        )
        g_conv.add_argument(
            "--schema",
            metavar="NAME",
            help="Schema name to record with the request (does not alter output).",
        )

        g_xml = parser.add_argument_group("XML Output")
        g_xml.add_argument(
            "-o",
            "--output-file",
            nargs="?",
            const=Application.DEFAULT_FILENAME_SENTINEL,
            metavar="FILE",
            help="Where to save the XML ('-' for stdout). Defaults to PDF name.",
        )
        g_xml.add_argument("--pretty", action="store_true", help="Indent the XML for reading.")
        g_xml.add_argument(
            "-D", "--dry-run", action="store_true", help="Show the summary, write nothing."
        )

        g_log = parser.add_argument_group("Logging")
        g_log.add_argument("-v", "--verbose", action="store_true", help="Log progress (INFO).")
        g_log.add_argument(
            "-d",
            "--debug",
            nargs="?",
            const="all",
            dest="debug_topics",
            metavar="TOPICS",
            help="DEBUG logging for topic prefixes: all,layout,structure,xml,backend,convert.",
        )
        g_log.add_argument("--color-logs", action="store_true", help="Colorize log output.")
        g_log.add_argument("--log-file", metavar="FILE", help="Also write logs to this file.")

        return parser.parse_args(args)


def main():
    """Console entry point; exits with the conversion's status code."""
    args = Application.parse_arguments()
    try:
        sys.exit(Application(args).run())
    except FileNotFoundError as e:
        logging.getLogger("pdfxml").critical(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        logging.getLogger("pdfxml").warning("Interrupted.")
        sys.exit(130)


if __name__ == "__main__":
    main()
