from __future__ import annotations
import os
import pandas as pd
from filelock import FileLock
from typing import Iterable

class CsvTable:
    """
    One CSV file guarded by a FileLock. Every cell is read back as str
    (empty string for missing values). The lock is re-entrant, so
    read-modify-write operations hold it for their whole duration.
    """
    def __init__(self, path: str, columns: list[str]):
        self.path = path
        self.columns = columns
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        self.lock = FileLock(self.path + ".lock")
        if not os.path.exists(self.path):
            df = pd.DataFrame(columns=self.columns)
            with self.lock:
                df.to_csv(self.path, index=False)

    def read(self) -> pd.DataFrame:
        with self.lock:
            if not os.path.exists(self.path):
                return pd.DataFrame(columns=self.columns)
            df = pd.read_csv(self.path, dtype=str, keep_default_na=False)
        for c in self.columns:
            if c not in df.columns:
                df[c] = ""
        return df

    def write(self, df: pd.DataFrame) -> None:
        # ensure schema before write
        for c in self.columns:
            if c not in df.columns:
                df[c] = ""
        df = df[self.columns]
        with self.lock:
            df.to_csv(self.path, index=False)

    def _mask(self, df: pd.DataFrame, conds: dict):
        mask = None
        for k, v in conds.items():
            m = df[k].astype(str) == str(v)
            mask = m if mask is None else (mask & m)
        return mask

    def append_row(self, row: dict) -> None:
        with self.lock:
            df = self.read()
            df = pd.concat([df, pd.DataFrame([{k: str(v) for k, v in row.items()}])], ignore_index=True)
            self.write(df)

    def upsert(self, key_cols: Iterable[str], row: dict) -> None:
        """Update rows matching row[key_cols], or append when none match."""
        if isinstance(key_cols, str):
            key_cols = [key_cols]
        with self.lock:
            df = self.read()
            mask = self._mask(df, {k: row.get(k, "") for k in key_cols})
            if df.empty or mask is None or not mask.any():
                self.append_row(row)
                return
            for col, val in row.items():
                if col not in df.columns:
                    df[col] = ""
                df.loc[mask, col] = str(val)
            self.write(df)

    def upsert_many(self, key_cols: Iterable[str], rows: list[dict]) -> None:
        with self.lock:
            for row in rows:
                self.upsert(key_cols, row)

    def delete(self, **conds) -> int:
        """Remove rows matching every condition; returns how many were removed."""
        with self.lock:
            df = self.read()
            if df.empty:
                return 0
            mask = self._mask(df, conds)
            if mask is None or not mask.any():
                return 0
            removed = int(mask.sum())
            self.write(df[~mask])
            return removed

    def find(self, **conds) -> pd.DataFrame:
        df = self.read()
        if df.empty:
            return df
        for k in conds:
            if k not in df.columns:
                return df.iloc[0:0]
        mask = self._mask(df, conds)
        return df[mask] if mask is not None else df
