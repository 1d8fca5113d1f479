"""Single-slot storage for the pending proposal.

Only one proposal can be in flight at a time; every store holds exactly zero
or one record. The file store keeps the record as pretty-printed JSON so an
operator can inspect or repair it by hand.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from .exceptions import NoPendingProposalError, ProposalFormatError
from .models import PendingProposal

logger = logging.getLogger(__name__)


class ProposalStore(Protocol):
    def exists(self) -> bool: ...
    def load(self) -> PendingProposal: ...
    def save(self, proposal: PendingProposal) -> None: ...
    def delete(self) -> bool: ...


def _atomic_write_json(path: Path, obj: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    data = (json.dumps(obj, indent=2) + "\n").encode("utf-8")
    with tempfile.NamedTemporaryFile(
        "wb", delete=False, dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp"
    ) as tmp:
        tmp_name = tmp.name
        try:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        except BaseException:
            tmp.close()
            os.unlink(tmp_name)
            raise
    try:
        os.replace(tmp_name, path)  # atomic on POSIX
    except BaseException:
        os.unlink(tmp_name)
        raise


class FileProposalStore:
    """Persist the pending proposal in a single JSON file (atomic writes)."""

    def __init__(self, path: os.PathLike[str] | str) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> PendingProposal:
        return PendingProposal.from_dict(self.read_raw())

    def read_raw(self) -> Dict[str, Any]:
        """Return the stored record without parsing it into a proposal."""
        try:
            with open(self.path, "rb") as f:
                content = f.read()
        except FileNotFoundError:
            raise NoPendingProposalError(str(self.path))

        try:
            return json.loads(content.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise ProposalFormatError(
                f"Pending transaction file {self.path} is not UTF-8 text: {e}"
            ) from e
        except json.JSONDecodeError as e:
            raise ProposalFormatError(
                f"Pending transaction file {self.path} is not valid JSON: {e}"
            ) from e

    def save(self, proposal: PendingProposal) -> None:
        _atomic_write_json(self.path, proposal.to_dict())
        logger.debug(f"Saved pending proposal to {self.path}")

    def delete(self) -> bool:
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        logger.debug(f"Deleted pending proposal {self.path}")
        return True


class InMemoryProposalStore:
    """Process-local store; keeps the serialized record so loads are independent copies."""

    def __init__(self, proposal: Optional[PendingProposal] = None) -> None:
        self._record: Optional[Dict[str, Any]] = None
        if proposal is not None:
            self.save(proposal)

    def exists(self) -> bool:
        return self._record is not None

    def load(self) -> PendingProposal:
        if self._record is None:
            raise NoPendingProposalError("memory")
        return PendingProposal.from_dict(copy.deepcopy(self._record))

    def read_raw(self) -> Dict[str, Any]:
        if self._record is None:
            raise NoPendingProposalError("memory")
        return copy.deepcopy(self._record)

    def save(self, proposal: PendingProposal) -> None:
        self._record = proposal.to_dict()

    def delete(self) -> bool:
        existed = self._record is not None
        self._record = None
        return existed


__all__ = ["ProposalStore", "FileProposalStore", "InMemoryProposalStore"]
