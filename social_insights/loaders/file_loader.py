"""File-based loader for post data (CSV/JSON) and saved AI answers."""

import csv
import io
import json
import logging
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from ..exceptions import DataLoadError
from ..models.posts import PostCollection, PostData

logger = logging.getLogger(__name__)


class FileLoader:
    """Load post-level performance data from local files (CSV or JSON)."""

    SUPPORTED_EXTENSIONS = {".csv", ".json"}

    def __init__(self, data_dir: str = "data"):
        self.data_dir = Path(data_dir)

    def _resolve(self, file_path: Union[str, Path]) -> Path:
        path = Path(file_path)
        if not path.is_absolute() and not path.exists():
            candidate = self.data_dir / path
            if candidate.exists():
                return candidate
        return path

    def load_posts(self, file_path: Union[str, Path]) -> PostCollection:
        """Load a post file (auto-detects format by extension).

        Supports: .csv, .json
        """
        path = self._resolve(file_path)

        if not path.exists():
            raise DataLoadError(f"File not found: {path}")

        ext = path.suffix.lower()

        if ext == ".csv":
            return self.load_csv_posts(path)
        elif ext == ".json":
            return self.load_json_posts(path)
        else:
            raise DataLoadError(
                f"Unsupported file type: {ext}. Supported: {', '.join(sorted(self.SUPPORTED_EXTENSIONS))}"
            )

    def load_csv_posts(self, file_path: Path) -> PostCollection:
        """Load posts from a CSV file with a header row."""
        try:
            text = Path(file_path).read_text(encoding="utf-8-sig")
        except OSError as e:
            raise DataLoadError(f"Could not read {file_path}: {e}")
        collection = self.load_from_text(text)
        collection.source = str(file_path)
        return collection

    def load_json_posts(self, file_path: Path) -> PostCollection:
        """Load posts from a JSON list, or an object with a "posts" list."""
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise DataLoadError(f"Could not read {file_path}: {e}")

        rows = data.get("posts", []) if isinstance(data, dict) else data
        if not isinstance(rows, list):
            raise DataLoadError(f"{file_path} does not contain a list of posts")

        return PostCollection(
            posts=self._parse_rows(rows),
            source=str(file_path),
        )

    def load_from_text(self, text: str) -> PostCollection:
        """Parse CSV text (for the paste/upload use case)."""
        reader = csv.DictReader(io.StringIO(text))
        rows = []
        for row in reader:
            # Normalize header spelling: "Engagement Rate" -> "engagement_rate"
            rows.append({
                (key or "").strip().lower().replace(" ", "_"): value
                for key, value in row.items()
            })
        return PostCollection(posts=self._parse_rows(rows))

    def _parse_rows(self, rows: list) -> list[PostData]:
        posts = []
        for index, row in enumerate(rows, 1):
            if not isinstance(row, dict) or not any(v not in (None, "") for v in row.values()):
                continue
            try:
                posts.append(PostData.model_validate(row))
            except ValidationError as e:
                logger.warning("Skipping row %d: %s", index, e)
        return posts

    def load_response(self, file_path: Union[str, Path]) -> str:
        """Read a saved AI answer (text or markdown)."""
        path = self._resolve(file_path)
        try:
            return path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise DataLoadError(f"Could not read {path}: {e}")
