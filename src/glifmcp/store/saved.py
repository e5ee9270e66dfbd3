"""
JSON-backed storage for saved tools.

Saved tools live in a single pretty-printed JSON array so users can edit the
file by hand. The store is the only owner of that file; everything else reads
fresh snapshots through get_all().

Design Principles:
    - Lossy-but-safe reads: a missing or malformed file reads as empty, and
      records that fail validation are dropped one by one
    - Permissive decoding: old records are repaired where possible
    - Guarded writes: save/remove/import refuse to overwrite content that
      didn't decode; remove_all is the explicit reset
    - Atomic writes: temp file + os.replace, so the file is always valid JSON
    - Serialized writers: one asyncio.Lock per store guards read-modify-write

Limitations:
    The lock only covers writers sharing this store instance. Two processes
    writing the same file are still last-write-wins.
"""

import asyncio
import json
import logging
import os
import tempfile
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

import aiofiles
import aiofiles.os
from pydantic import ValidationError

from glifmcp.errors import StoreWriteError
from glifmcp.naming import ensure_tool_name
from glifmcp.schema import SavedBinding, parse_id_list

logger = logging.getLogger(__name__)

IMPORTED_TOOL_PREFIX = "glif_"


@dataclass(frozen=True)
class DecodeResult:
    """
    Outcome of decoding the saved tools file.

    Decoding never raises. When the whole content can't be used, bindings is
    empty and recovered is True with the reason attached. Individual records
    that fail validation are dropped and counted, keeping the rest.

    Attributes:
        bindings: Decoded bindings in file order
        recovered: Whether any content was discarded
        reason: Why content was discarded (None when it decoded cleanly)
        dropped: Number of records discarded individually
    """

    bindings: list[SavedBinding] = field(default_factory=list)
    recovered: bool = False
    reason: str | None = None
    dropped: int = 0

    @classmethod
    def ok(cls, bindings: list[SavedBinding]) -> "DecodeResult":
        """Content decoded into bindings."""
        return cls(bindings=bindings)

    @classmethod
    def empty(cls, reason: str) -> "DecodeResult":
        """Content unusable; treat as an empty collection."""
        return cls(recovered=True, reason=reason)


def decode_saved_tools(text: str | None) -> DecodeResult:
    """
    Decode the saved tools file content.

    Args:
        text: Raw file content, or None when the file doesn't exist

    Returns:
        DecodeResult with the bindings that validated
    """
    if not text or not text.strip():
        return DecodeResult.ok([])

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        return DecodeResult.empty(f"invalid JSON: {e}")

    if not isinstance(data, list):
        return DecodeResult.empty(f"expected a JSON array, got {type(data).__name__}")

    bindings: list[SavedBinding] = []
    problems: list[str] = []
    for index, item in enumerate(data):
        try:
            bindings.append(SavedBinding.model_validate(item))
        except ValidationError as e:
            problems.append(f"record {index}: {e.error_count()} validation error(s)")

    if problems:
        return DecodeResult(
            bindings=bindings,
            recovered=True,
            reason=f"dropped invalid records ({'; '.join(problems)})",
            dropped=len(problems),
        )
    return DecodeResult.ok(bindings)


def encode_saved_tools(bindings: Iterable[SavedBinding]) -> str:
    """Serialize bindings as a pretty-printed JSON array."""
    return json.dumps([b.to_json_dict() for b in bindings], indent=2, ensure_ascii=False)


class SavedToolStore:
    """
    Persistent collection of saved tool bindings.

    Usage:
        store = SavedToolStore(Path("~/.config/glif-mcp/saved-glifs.json"))
        await store.save(SavedBinding(source_id="abc", tool_name="my tool"))
        bindings = await store.get_all()
        removed = await store.remove("my_tool")

    Attributes:
        path: Location of the JSON file
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()
        self._write_lock = asyncio.Lock()

    # =========================================================================
    # Reads
    # =========================================================================

    async def read(self) -> DecodeResult:
        """Read and decode the file, reporting whether content was discarded."""
        try:
            async with aiofiles.open(self.path, encoding="utf-8") as f:
                text = await f.read()
        except FileNotFoundError:
            logger.debug("Saved tools file %s doesn't exist, using empty list", self.path)
            return DecodeResult.ok([])
        except UnicodeDecodeError as e:
            result = DecodeResult.empty(f"not valid UTF-8: {e}")
        except OSError as e:
            result = DecodeResult.empty(f"unreadable: {e}")
        else:
            result = decode_saved_tools(text)

        if result.recovered:
            logger.warning("Ignoring content of saved tools file %s: %s", self.path, result.reason)
        return result

    async def get_all(self) -> list[SavedBinding]:
        """Return every saved binding in file order (empty on any read problem)."""
        return (await self.read()).bindings

    async def _read_for_update(self, operation: str) -> list[SavedBinding]:
        """
        Read the bindings a write will be based on.

        Raises:
            StoreWriteError: If the file holds content that didn't decode,
                since writing would silently discard it
        """
        result = await self.read()
        if result.recovered:
            raise StoreWriteError(
                path=str(self.path),
                operation=operation,
                underlying_error=f"refusing to overwrite content that didn't decode: {result.reason}",
            )
        return result.bindings

    # =========================================================================
    # Writes
    # =========================================================================

    async def save(self, binding: SavedBinding) -> SavedBinding:
        """
        Insert a binding, or replace the one with the same tool name.

        Args:
            binding: The binding to store (its tool name is already sanitized)

        Returns:
            The binding as stored

        Raises:
            StoreWriteError: If the file can't be written, or holds records
                that didn't decode
        """
        async with self._write_lock:
            bindings = await self._read_for_update("save")
            self._upsert(bindings, binding)
            await self._write(bindings, operation="save")
        logger.debug("Saved tool %s -> %s", binding.tool_name, binding.source_id)
        return binding

    async def remove(self, tool_name: str) -> bool:
        """
        Remove a binding by tool name.

        Returns:
            True if a binding was removed, False if none matched (no write)

        Raises:
            StoreWriteError: If the file holds records that didn't decode
        """
        async with self._write_lock:
            bindings = await self._read_for_update("remove")
            remaining = [b for b in bindings if b.tool_name != tool_name]
            if len(remaining) == len(bindings):
                logger.debug("Saved tool %s not found for removal", tool_name)
                return False
            await self._write(remaining, operation="remove")
        logger.debug("Removed saved tool %s", tool_name)
        return True

    async def remove_all(self) -> int:
        """
        Remove every binding, including content that didn't decode.

        Returns:
            How many bindings existed before the reset
        """
        async with self._write_lock:
            count = len(await self.get_all())
            await self._write([], operation="reset")
        logger.debug("Removed all %d saved tools", count)
        return count

    async def import_ids(self, ids: str | Iterable[str]) -> list[SavedBinding]:
        """
        Bulk-import workflow ids as saved tools named glif_<id>.

        Ids are split on commas (when given as one string), trimmed and
        deduplicated. An imported binding replaces any stored binding with the
        same tool name.

        Args:
            ids: Comma-separated string or iterable of workflow ids

        Returns:
            The bindings that were written, in input order

        Raises:
            StoreWriteError: If the file holds records that didn't decode
        """
        raw = ids if isinstance(ids, str) else ",".join(ids)
        imported = [
            SavedBinding(
                source_id=workflow_id,
                tool_name=ensure_tool_name(f"{IMPORTED_TOOL_PREFIX}{workflow_id}", workflow_id),
                display_name=workflow_id,
                description=f"Run glif {workflow_id}",
            )
            for workflow_id in parse_id_list(raw)
        ]
        if not imported:
            return []

        async with self._write_lock:
            bindings = await self._read_for_update("import")
            for binding in imported:
                self._upsert(bindings, binding)
            await self._write(bindings, operation="import")
        logger.info("Imported %d workflow id(s) into %s", len(imported), self.path)
        return imported

    @staticmethod
    def _upsert(bindings: list[SavedBinding], binding: SavedBinding) -> None:
        for index, existing in enumerate(bindings):
            if existing.tool_name == binding.tool_name:
                bindings[index] = binding
                return
        bindings.append(binding)

    async def _write(self, bindings: list[SavedBinding], operation: str) -> None:
        """Write atomically: temp file in the same directory, then os.replace."""
        content = encode_saved_tools(bindings)
        try:
            await aiofiles.os.makedirs(self.path.parent, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            os.close(fd)
            try:
                async with aiofiles.open(tmp_name, "w", encoding="utf-8") as f:
                    await f.write(content)
                    await f.flush()
                await aiofiles.os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise StoreWriteError(
                path=str(self.path),
                operation=operation,
                underlying_error=str(e),
            ) from e
