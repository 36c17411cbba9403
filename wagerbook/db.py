"""SQLAlchemy engine + ledger store wiring.

The Flask app owns a single ``LedgerStore``; services open their own short
transactions through it instead of sharing a request-wide session.
"""

from __future__ import annotations

import os

from flask import Flask, current_app
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url

from wagerbook.ledger import LedgerStore
from wagerbook.models.base import Base


def _assume_role_with_vercel_oidc(region: str) -> dict[str, str] | None:
    """Assume AWS_ROLE_ARN using VERCEL_OIDC_TOKEN if available."""

    token = os.getenv("VERCEL_OIDC_TOKEN")
    role_arn = os.getenv("AWS_ROLE_ARN")
    if not token or not role_arn:
        return None

    import boto3

    sts = boto3.client("sts", region_name=region)
    resp = sts.assume_role_with_web_identity(
        RoleArn=role_arn,
        RoleSessionName="wagerbook-rds",
        WebIdentityToken=token,
    )
    c = resp["Credentials"]
    return {
        "aws_access_key_id": c["AccessKeyId"],
        "aws_secret_access_key": c["SecretAccessKey"],
        "aws_session_token": c["SessionToken"],
    }


def _generate_rds_iam_token(*, host: str, port: int, user: str, region: str) -> str:
    """Generate an RDS IAM auth token to use as the Postgres password."""

    import boto3

    creds = _assume_role_with_vercel_oidc(region) or {}
    rds = boto3.client("rds", region_name=region, **creds)
    return rds.generate_db_auth_token(DBHostname=host, Port=port, DBUsername=user, Region=region)


def _install_sqlite_hooks(engine: Engine) -> None:
    """Make every SQLite transaction take the write lock up front.

    SQLite has no row locks; ``BEGIN IMMEDIATE`` serializes writers on the
    database file so a read-check-write sequence cannot be interleaved.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:  # type: ignore[no-untyped-def]
        # Disable pysqlite's own BEGIN handling; we emit it in _on_begin.
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn) -> None:  # type: ignore[no-untyped-def]
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_app_engine(database_url: str, *, sqlite_busy_timeout: int = 15) -> Engine:
    url = make_url(database_url)
    backend = url.get_backend_name()

    if backend == "sqlite":
        engine = create_engine(
            database_url,
            connect_args={"timeout": sqlite_busy_timeout},
            future=True,
        )
        _install_sqlite_hooks(engine)
        return engine

    # Postgres without a static password: authenticate with an IAM token.
    if backend == "postgresql" and not url.password:
        region = os.getenv("AWS_REGION")
        host = url.host
        username = url.username
        database = url.database

        if region and host and username and database:
            import psycopg2

            port = int(url.port or 5432)
            sslmode = (url.query or {}).get("sslmode") or os.getenv("PGSSLMODE") or "require"

            def _creator() -> object:
                token = _generate_rds_iam_token(host=host, port=port, user=username, region=region)
                return psycopg2.connect(
                    host=host,
                    port=port,
                    user=username,
                    password=token,
                    dbname=database,
                    sslmode=sslmode,
                )

            return create_engine(
                "postgresql+psycopg2://",
                creator=_creator,
                pool_pre_ping=True,
                isolation_level="READ COMMITTED",
                future=True,
            )

    return create_engine(database_url, pool_pre_ping=True, isolation_level="READ COMMITTED", future=True)


def create_ledger_store(
    database_url: str,
    *,
    lock_timeout_ms: int = 5000,
    sqlite_busy_timeout: int = 15,
    create_tables: bool = True,
) -> LedgerStore:
    """Build an engine, optionally create tables, and wrap it in a LedgerStore."""

    engine = create_app_engine(database_url, sqlite_busy_timeout=sqlite_busy_timeout)
    if create_tables:
        # Import models so they register with Base.metadata
        from wagerbook import models  # noqa: F401

        Base.metadata.create_all(bind=engine)

    return LedgerStore(engine, lock_timeout_ms=lock_timeout_ms)


def init_db(app: Flask) -> None:
    """Initialize the ledger store for the app."""

    store = create_ledger_store(
        str(app.config["DATABASE_URL"]),
        lock_timeout_ms=int(app.config.get("LOCK_TIMEOUT_MS", 5000)),
        sqlite_busy_timeout=int(app.config.get("SQLITE_BUSY_TIMEOUT_SECONDS", 15)),
    )

    app.extensions["engine"] = store.engine
    app.extensions["ledger"] = store


def get_ledger() -> LedgerStore:
    """Get the ledger store bound to the current app."""

    store: LedgerStore | None = current_app.extensions.get("ledger")
    if store is None:
        raise RuntimeError("Ledger store not initialized")
    return store
