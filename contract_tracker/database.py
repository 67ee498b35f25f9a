"""
Contract Tracker - Database Module
SQLite storage for contract records.
"""

import sqlite3
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Any, Optional

import numpy as np
import pandas as pd

from contract_tracker.config import Config
from contract_tracker.models import Contract, CONTRACT_FIELDS

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Manages the SQLite contract store. Serves as the ContractRepository for analysis."""

    def __init__(self, db_path: Path = None):
        self.db_path = Path(db_path or Config.DATABASE_PATH)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_database()
        logger.info(f"Database initialized at {self.db_path}")

    def _get_connection(self):
        """Get database connection with row factory."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def _init_database(self):
        """Initialize database tables."""
        conn = self._get_connection()
        cursor = conn.cursor()

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS contracts (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                contract_name TEXT NOT NULL,
                vendor_name TEXT,
                contract_type TEXT,
                contract_subtype TEXT,
                contract_number TEXT,

                -- Dates (YYYY-MM-DD)
                start_date TEXT,
                end_date TEXT,

                -- Financials
                payment_terms TEXT,
                contract_value REAL,

                -- Renewal
                renewal_type TEXT,
                notice_period_days INTEGER DEFAULT 30,

                file_path TEXT,
                created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                updated_at TEXT DEFAULT CURRENT_TIMESTAMP
            )
        ''')

        cursor.execute('CREATE INDEX IF NOT EXISTS idx_contracts_end_date ON contracts(end_date)')
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_contracts_vendor ON contracts(vendor_name)')

        conn.commit()
        conn.close()

    # ==================
    # READS
    # ==================

    def get_all_contracts(self) -> pd.DataFrame:
        """Get all contracts as a DataFrame, ordered by end date (open-ended last)."""
        conn = self._get_connection()
        query = "SELECT * FROM contracts ORDER BY end_date IS NULL, end_date ASC, id ASC"
        df = pd.read_sql_query(query, conn)
        conn.close()
        # Missing REAL/INTEGER cells come back as NaN
        return df.astype(object).replace({np.nan: None})

    def list_all(self) -> List[Contract]:
        """Every stored contract, in insertion order."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM contracts ORDER BY id ASC")
        rows = cursor.fetchall()
        conn.close()
        return [Contract.from_record(dict(row)) for row in rows]

    def get_contract(self, contract_id: int) -> Optional[Contract]:
        """Get a single contract by ID."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM contracts WHERE id = ?", (contract_id,))
        row = cursor.fetchone()
        conn.close()
        return Contract.from_record(dict(row)) if row else None

    def get_distinct_values(self, column: str) -> List[str]:
        """Sorted distinct non-empty values of a descriptive column."""
        if column not in ('contract_type', 'vendor_name', 'contract_subtype'):
            raise ValueError(f"Unsupported column: {column}")
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute(f"""
            SELECT DISTINCT {column} FROM contracts
            WHERE {column} IS NOT NULL AND TRIM({column}) != ''
            ORDER BY {column}
        """)
        values = [row[0] for row in cursor.fetchall()]
        conn.close()
        return values

    # ==================
    # WRITES
    # ==================

    def create_contract(self, data: Dict[str, Any]) -> int:
        """Insert a new contract and return its id."""
        data = {k: v for k, v in data.items() if k in CONTRACT_FIELDS}
        now = datetime.now().isoformat()
        data['created_at'] = now
        data['updated_at'] = now

        conn = self._get_connection()
        cursor = conn.cursor()
        fields = list(data.keys())
        placeholders = ', '.join(['?' for _ in fields])
        cursor.execute(f"INSERT INTO contracts ({', '.join(fields)}) VALUES ({placeholders})", list(data.values()))
        contract_id = cursor.lastrowid
        conn.commit()
        conn.close()

        logger.info(f"Created contract {contract_id}")
        return contract_id

    def update_contract(self, contract_id: int, data: Dict[str, Any]) -> bool:
        """Update an existing contract. Returns False if it does not exist."""
        data = {k: v for k, v in data.items() if k in CONTRACT_FIELDS}
        data['updated_at'] = datetime.now().isoformat()

        conn = self._get_connection()
        cursor = conn.cursor()
        fields = [f"{k} = ?" for k in data.keys()]
        values = list(data.values())
        values.append(contract_id)
        cursor.execute(f"UPDATE contracts SET {', '.join(fields)} WHERE id = ?", values)
        updated = cursor.rowcount > 0
        conn.commit()
        conn.close()

        if updated:
            logger.info(f"Updated contract {contract_id}")
        return updated

    def delete_contract(self, contract_id: int) -> bool:
        """Delete a contract. Returns False if it does not exist."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("DELETE FROM contracts WHERE id = ?", (contract_id,))
        deleted = cursor.rowcount > 0
        conn.commit()
        conn.close()

        if deleted:
            logger.info(f"Deleted contract {contract_id}")
        return deleted
