import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class JsonSource:
    """Rows from a saved provider payload.

    The file holds either a list of objects or an object wrapping that list
    under ``records_key`` (the roster provider's player dump uses ``players``).
    """

    def __init__(self, path: str | Path, records_key: str | None = None) -> None:
        self._path = Path(path)
        self._records_key = records_key

    @property
    def source_type(self) -> str:
        return "json"

    @property
    def source_detail(self) -> str:
        return str(self._path)

    def fetch(self, **params: Any) -> list[dict[str, Any]]:
        logger.debug("Reading JSON %s", self._path)
        with open(self._path, encoding=params.pop("encoding", "utf-8")) as f:
            payload = json.load(f)
        if isinstance(payload, dict):
            if self._records_key is None:
                raise ValueError(f"{self._path} holds an object; expected a list of records")
            payload = payload.get(self._records_key, [])
        if not isinstance(payload, list):
            raise ValueError(f"{self._path} does not contain a list of records")
        rows = [row for row in payload if isinstance(row, dict)]
        logger.debug("Read %d rows from %s", len(rows), self._path)
        return rows
