"""
Encrypted Estate Plan Store

Persistent storage for estate plans and projection snapshots with:
- SQLite database backend
- AES encryption of every plan and snapshot payload (via Fernet)
- Hash guard: an unchanged projection is not written twice
- Audit log of writes per user

Security:
- Payloads are encrypted at rest; user ids, timestamps and hashes are not
- Encryption key from the constructor, else ESTATE_STORE_ENCRYPTION_KEY

Copyright (c) 2026 Andre. All rights reserved.
"""

import base64
import json
import os
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from cryptography.fernet import Fernet

from calculators.estate_models import EstateCalculationInput, EstateProjection
from core.hashing import canonical_json_dumps, create_audit_entry
from utils.logging_config import bind_user, setup_logger

logger = setup_logger(__name__)

ENCRYPTION_KEY_ENV = "ESTATE_STORE_ENCRYPTION_KEY"
DATA_DIR_ENV = "ESTATE_DATA_DIR"


def default_db_path() -> str:
    return str(Path(os.environ.get(DATA_DIR_ENV, "data")) / "estate_plans.db")


class EncryptionManager:
    """Manages encryption/decryption of stored payloads."""

    def __init__(self, key: Optional[Union[str, bytes]] = None):
        """
        Args:
            key: Base64-encoded Fernet key, or None to load from the environment
        """
        if key is None:
            key = os.environ.get(ENCRYPTION_KEY_ENV)
            if not key:
                logger.warning(f"{ENCRYPTION_KEY_ENV} not set, generating a new key")
                # Data written with this key is unreadable once the process exits
                key = Fernet.generate_key().decode()
                logger.warning(f"Set {ENCRYPTION_KEY_ENV} to keep stored plans readable")

        if isinstance(key, str):
            key = key.encode()

        self.cipher = Fernet(key)

    def encrypt(self, data: str) -> str:
        """Encrypt string data, return base64 encoded cipher text."""
        encrypted = self.cipher.encrypt(data.encode())
        return base64.b64encode(encrypted).decode()

    def decrypt(self, encrypted_data: str) -> str:
        """Decrypt base64 encoded cipher text, return original string."""
        decoded = base64.b64decode(encrypted_data.encode())
        return self.cipher.decrypt(decoded).decode()

    def encrypt_json(self, payload: Any) -> str:
        return self.encrypt(canonical_json_dumps(payload))

    def decrypt_json(self, encrypted: str) -> Any:
        return json.loads(self.decrypt(encrypted))


class EstatePlanStore:
    """
    Persistent encrypted storage for estate plans and projections.

    Decimal values come back from storage as strings, exactly as written.
    """

    def __init__(self, db_path: Optional[str] = None, encryption_key: Optional[str] = None):
        """
        Args:
            db_path: Path to SQLite database file (default under ESTATE_DATA_DIR)
            encryption_key: Optional Fernet key (loads from the environment if None)
        """
        self.db_path = db_path or default_db_path()
        self.encryption = EncryptionManager(encryption_key)

        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_database()

        logger.info(f"EstatePlanStore initialized (encrypted): {self.db_path}")

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=30.0)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_database(self):
        with self._get_conn() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS estate_plans (
                    user_id TEXT PRIMARY KEY,
                    updated_at TIMESTAMP NOT NULL,
                    plan_enc TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS projection_snapshots (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    created_at TIMESTAMP NOT NULL,
                    content_hash TEXT NOT NULL,
                    calculation_hash TEXT NOT NULL,
                    payload_enc TEXT NOT NULL
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_snapshot_user ON projection_snapshots(user_id)")

            conn.execute("""
                CREATE TABLE IF NOT EXISTS audit_log (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    timestamp TIMESTAMP NOT NULL,
                    action TEXT NOT NULL,
                    content_hash TEXT
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_audit_user ON audit_log(user_id)")

            conn.commit()
            logger.debug("Estate store schema initialized")

    def _record_audit(self, conn: sqlite3.Connection, user_id: str, action: str, content_hash: Optional[str]):
        conn.execute(
            "INSERT INTO audit_log (user_id, timestamp, action, content_hash) VALUES (?, ?, ?, ?)",
            (user_id, datetime.now(timezone.utc).isoformat(), action, content_hash)
        )

    # ===== ESTATE PLANS =====

    def put_estate_plan(self, user_id: str, plan: Dict[str, Any]) -> None:
        """Store the estate plan snapshot for a user; replaces any previous one."""
        now = datetime.now(timezone.utc).isoformat()
        with self._get_conn() as conn:
            conn.execute(
                """
                INSERT INTO estate_plans (user_id, updated_at, plan_enc) VALUES (?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    updated_at = excluded.updated_at,
                    plan_enc = excluded.plan_enc
                """,
                (user_id, now, self.encryption.encrypt_json(plan))
            )
            self._record_audit(conn, user_id, "put_estate_plan", None)
            conn.commit()

        bind_user(logger, user_id).info("Stored estate plan")

    def get_estate_plan(self, user_id: str) -> Optional[Dict[str, Any]]:
        with self._get_conn() as conn:
            row = conn.execute(
                "SELECT plan_enc FROM estate_plans WHERE user_id = ?",
                (user_id,)
            ).fetchone()

        if row is None:
            return None
        return self.encryption.decrypt_json(row["plan_enc"])

    # ===== PROJECTIONS =====

    def save_projection(
        self,
        user_id: str,
        calc_input: EstateCalculationInput,
        projection: EstateProjection
    ) -> bool:
        """
        Store a projection snapshot unless it matches the latest one.

        Returns:
            True if a new snapshot was written, False if the content hash
            matched the latest stored snapshot
        """
        entry = create_audit_entry(
            f"estate_projection_{user_id}",
            calc_input.model_dump(mode="json"),
            projection.to_dict()
        )
        content_hash = entry["content_hash"]

        with self._get_conn() as conn:
            latest = conn.execute(
                "SELECT content_hash FROM projection_snapshots WHERE user_id = ? ORDER BY id DESC LIMIT 1",
                (user_id,)
            ).fetchone()

            if latest is not None and latest["content_hash"] == content_hash:
                bind_user(logger, user_id).debug("Projection unchanged, skipping write")
                return False

            conn.execute(
                """
                INSERT INTO projection_snapshots
                (user_id, created_at, content_hash, calculation_hash, payload_enc)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    entry["timestamp"],
                    content_hash,
                    entry["calculation_hash"],
                    self.encryption.encrypt_json(entry)
                )
            )
            self._record_audit(conn, user_id, "save_projection", content_hash)
            conn.commit()

        bind_user(logger, user_id).info(f"Saved projection snapshot ({content_hash[:19]})")
        return True

    def latest_projection(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Latest snapshot as the sealed audit entry (inputs, outputs, hashes)."""
        with self._get_conn() as conn:
            row = conn.execute(
                "SELECT payload_enc FROM projection_snapshots WHERE user_id = ? ORDER BY id DESC LIMIT 1",
                (user_id,)
            ).fetchone()

        if row is None:
            return None
        return self.encryption.decrypt_json(row["payload_enc"])

    def projection_count(self, user_id: str) -> int:
        with self._get_conn() as conn:
            row = conn.execute(
                "SELECT COUNT(*) AS count FROM projection_snapshots WHERE user_id = ?",
                (user_id,)
            ).fetchone()
        return row["count"]

    def audit_log(self, user_id: str, limit: int = 50) -> List[Dict[str, Any]]:
        """Most recent writes for a user, newest first."""
        with self._get_conn() as conn:
            rows = conn.execute(
                "SELECT user_id, timestamp, action, content_hash FROM audit_log "
                "WHERE user_id = ? ORDER BY id DESC LIMIT ?",
                (user_id, limit)
            ).fetchall()

        return [dict(row) for row in rows]
