# --- pdfxml_web/services/storage_service.py ---
import logging
import sqlite3
from contextlib import closing, contextmanager
from datetime import datetime, timezone

log = logging.getLogger("pdfxml_web.storage")

SUMMARY_COLUMNS = "id, user_id, file_name, page_count, created_at"


class StorageService:
    """
    Stores finished conversions in SQLite. A record is written only after its
    conversion has fully succeeded, so there are no partial rows to clean up.
    """

    def __init__(self, db_path: str):
        if not db_path:
            raise ValueError("Database path cannot be empty.")
        self.db_path = db_path

    @contextmanager
    def _transaction(self):
        """Yields a connection that commits on success and is always closed."""
        with closing(sqlite3.connect(self.db_path)) as conn:
            conn.row_factory = sqlite3.Row
            with conn:
                yield conn

    def init_db(self):
        """Creates the conversions table and its index. Safe to run on every start."""
        try:
            with self._transaction() as conn:
                self._create_conversions_table(conn)
        except sqlite3.Error as e:
            log.error("Database initialization failed for %s: %s", self.db_path, e)
            raise
        log.info("Database schema ready at %s.", self.db_path)

    def _create_conversions_table(self, conn: sqlite3.Connection):
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS conversions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                file_name TEXT NOT NULL,
                xml_content TEXT NOT NULL,
                page_count INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL
            );
            """
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_conversions_user "
            "ON conversions (user_id, created_at);"
        )

    @staticmethod
    def _timestamp(value) -> str:
        """UTC ISO-8601 text; equal-width strings keep ORDER BY chronological."""
        value = value or datetime.now(timezone.utc)
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat(timespec="microseconds")

    # --- Conversion records ---
    def persist(self, record: dict) -> int:
        """Stores one conversion record and returns its id."""
        log.debug("Saving '%s' for user '%s'.", record["file_name"], record["user_id"])
        with self._transaction() as conn:
            cursor = conn.execute(
                "INSERT INTO conversions "
                "(user_id, file_name, xml_content, page_count, created_at) "
                "VALUES (?, ?, ?, ?, ?);",
                (
                    record["user_id"],
                    record["file_name"],
                    record["xml_content"],
                    record.get("page_count") or 0,
                    self._timestamp(record.get("created_at")),
                ),
            )
            return cursor.lastrowid

    def list(self, user_id: str, include_xml: bool = True):
        """A user's conversions, newest first; ties go to the later insert."""
        columns = "*" if include_xml else SUMMARY_COLUMNS
        with self._transaction() as conn:
            rows = conn.execute(
                f"SELECT {columns} FROM conversions WHERE user_id = ? "
                "ORDER BY created_at DESC, id DESC;",
                (user_id,),
            ).fetchall()
        log.debug("User '%s' has %d conversion(s).", user_id, len(rows))
        return rows

    def get(self, conversion_id: int):
        with self._transaction() as conn:
            return conn.execute(
                "SELECT * FROM conversions WHERE id = ?;", (conversion_id,)
            ).fetchone()

    def delete(self, conversion_id: int) -> bool:
        with self._transaction() as conn:
            deleted = conn.execute(
                "DELETE FROM conversions WHERE id = ?;", (conversion_id,)
            ).rowcount
        log.debug("Delete conversion %d: %s.", conversion_id, "done" if deleted else "not found")
        return deleted > 0
