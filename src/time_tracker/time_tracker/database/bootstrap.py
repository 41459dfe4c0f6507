from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Iterator

import mysql.connector
from werkzeug.security import generate_password_hash

from ..categories.seed import CategorySeed
from .connection import DBConfig

logger = logging.getLogger(__name__)


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # schema.sql names a database; the configured one wins.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_line_comments(sql: str) -> str:
    return "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))


def iter_sql_statements(sql: str) -> Iterator[str]:
    """Split a script on ';' outside of quoted strings."""
    buf: list[str] = []
    quote: str | None = None
    escape = False

    for ch in sql:
        buf.append(ch)
        if escape:
            escape = False
        elif ch == "\\":
            escape = True
        elif quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _exec_sql(cur, statements: Iterable[str]) -> None:
    for stmt in statements:
        cur.execute(stmt)


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_mapping(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    target = DBConfig.from_mapping(db_config)
    ensure_database_exists(db_config)

    sql = Path(schema_path).read_text(encoding="utf-8")
    sql = _strip_create_db_and_use(_strip_line_comments(sql))

    conn = _connect(target)
    try:
        cur = conn.cursor()
        _exec_sql(cur, iter_sql_statements(sql))
        conn.commit()
    finally:
        conn.close()
    logger.info("Schema applied to %s", target.describe())


def upsert_admin(db_config: dict, *, name: str, email: str, password: str) -> int:
    """Create or refresh an ADMIN account; returns its user_id."""
    target = DBConfig.from_mapping(db_config)
    password_hash = generate_password_hash(password)

    conn = _connect(target)
    try:
        cur = conn.cursor(dictionary=True)
        cur.execute("SELECT user_id FROM users WHERE email=%s", (email,))
        existing = cur.fetchone()
        if existing:
            cur.execute(
                """
                UPDATE users
                SET name=%s, role='ADMIN', password_hash=%s, is_active=1
                WHERE user_id=%s
                """,
                (name, password_hash, int(existing["user_id"])),
            )
            user_id = int(existing["user_id"])
        else:
            cur.execute(
                """
                INSERT INTO users (name, email, role, password_hash, is_active)
                VALUES (%s, %s, 'ADMIN', %s, 1)
                """,
                (name, email, password_hash),
            )
            user_id = int(cur.lastrowid)
        conn.commit()
    finally:
        conn.close()
    logger.info("Admin account ready: %s (user_id=%s)", email, user_id)
    return user_id


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(DBConfig.from_mapping(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()


def upsert_categories(db_config: dict, seeds: Iterable[CategorySeed]) -> int:
    """Insert or update categories keyed by (role, name); returns rows written."""
    rows = [
        (s.role.value, s.name, s.sort_order, int(s.is_active), int(s.requires_description))
        for s in seeds
    ]
    if not rows:
        return 0

    conn = _connect(DBConfig.from_mapping(db_config))
    try:
        cur = conn.cursor()
        cur.executemany(
            """
            INSERT INTO task_categories (role, name, sort_order, is_active, requires_description)
            VALUES (%s, %s, %s, %s, %s)
            ON DUPLICATE KEY UPDATE
                sort_order=VALUES(sort_order),
                is_active=VALUES(is_active),
                requires_description=VALUES(requires_description)
            """,
            rows,
        )
        conn.commit()
    finally:
        conn.close()
    logger.info("Upserted %s task categories", len(rows))
    return len(rows)
