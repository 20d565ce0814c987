"""In-memory candidate source (fixtures, JSON exports, bias audits)."""

import json
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from subsidy_matcher.catalog.normalize import candidate_from_record, is_listed
from subsidy_matcher.core.exceptions import CatalogError
from subsidy_matcher.core.logging import get_logger
from subsidy_matcher.matching.schemas import AnalyzedProfile, SubsidyCandidate
from subsidy_matcher.settings import settings

logger = get_logger("catalog.memory")


class InMemoryCandidateSource:
    """Serves a fixed candidate list. Normalized once at construction."""

    def __init__(
        self,
        records: Iterable[Union[SubsidyCandidate, Mapping[str, Any]]],
        locale: Optional[str] = None,
    ):
        locale = locale or settings.display_locale
        self._candidates: List[SubsidyCandidate] = []
        skipped = 0
        for record in records:
            if isinstance(record, SubsidyCandidate):
                self._candidates.append(record)
                continue
            if not is_listed(record):
                continue
            try:
                self._candidates.append(candidate_from_record(record, locale))
            except (KeyError, ValidationError) as e:
                skipped += 1
                logger.warning("Skipping malformed catalog record %s: %s", record.get("id"), e)
        if skipped:
            logger.info("%d catalog records skipped", skipped)

    @classmethod
    def from_json_file(cls, path: Union[str, Path], locale: Optional[str] = None) -> "InMemoryCandidateSource":
        """Load a JSON array (or {"subsidies": [...]}) of catalog records.

        Raises:
            CatalogError: If the file is missing or not valid JSON
        """
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogError(f"Cannot read catalog file: {e}", source=str(path)) from e
        if isinstance(data, dict):
            data = data.get("subsidies", [])
        if not isinstance(data, list):
            raise CatalogError("Catalog file must contain a list of records", source=str(path))
        return cls(data, locale=locale)

    def __len__(self) -> int:
        return len(self._candidates)

    def fetch_candidates(self, analyzed: AnalyzedProfile) -> List[SubsidyCandidate]:
        return list(self._candidates)
