"""Tests for data loaders."""

import json

import pytest

from social_insights.exceptions import DataLoadError
from social_insights.loaders.file_loader import FileLoader


CSV_TEXT = """Post Type,Likes,Comments,Shares,Views,Engagement Rate,Post Day,Primary Age Group
reel,"1,200",45,30,15000,5.2,Saturday,18-24
photo,300,12,4,4000,2.1,Monday,25-34
,,,,,,,
carousel,800,20,,9000,3.4,Friday,18-24
"""


class TestFileLoader:
    """Test file-based post loader."""

    def test_load_csv(self, tmp_path):
        """Test loading a CSV file with spaced headers."""
        test_file = tmp_path / "posts.csv"
        test_file.write_text(CSV_TEXT)

        loader = FileLoader(data_dir=str(tmp_path))
        collection = loader.load_posts(test_file)

        assert collection.total_posts == 3
        assert collection.posts[0].likes == 1200
        assert collection.posts[0].engagement_rate == 5.2
        assert collection.posts[2].shares == 0
        assert collection.posts[1].primary_age_group == "25-34"
        assert collection.source == str(test_file)

    def test_load_csv_relative_to_data_dir(self, tmp_path):
        """Test resolving a bare file name against the data directory."""
        (tmp_path / "posts.csv").write_text(CSV_TEXT)

        loader = FileLoader(data_dir=str(tmp_path))
        collection = loader.load_posts("posts.csv")

        assert collection.total_posts == 3

    def test_load_json_list(self, tmp_path):
        """Test loading a JSON list of posts."""
        test_file = tmp_path / "posts.json"
        test_file.write_text(json.dumps([
            {"likes": 10, "views": 100, "post_type": "story"},
            {"likes": "20", "views": "200", "post_type": "reel"},
        ]))

        collection = FileLoader(data_dir=str(tmp_path)).load_posts(test_file)

        assert collection.total_posts == 2
        assert collection.totals["likes"] == 30

    def test_load_json_object(self, tmp_path):
        """Test loading a JSON object with a posts key."""
        test_file = tmp_path / "posts.json"
        test_file.write_text(json.dumps({"posts": [{"likes": 5}]}))

        collection = FileLoader(data_dir=str(tmp_path)).load_posts(test_file)

        assert collection.posts[0].likes == 5

    def test_load_from_text(self):
        """Test parsing pasted CSV text."""
        collection = FileLoader().load_from_text(CSV_TEXT)

        assert collection.total_posts == 3
        assert collection.post_type_distribution == {"reel": 1, "photo": 1, "carousel": 1}
        assert collection.source is None

    def test_missing_file(self, tmp_path):
        """Test loading a file that does not exist."""
        loader = FileLoader(data_dir=str(tmp_path))

        with pytest.raises(DataLoadError, match="not found"):
            loader.load_posts("missing.csv")

    def test_unsupported_extension(self, tmp_path):
        """Test an unknown file type."""
        test_file = tmp_path / "posts.xlsx"
        test_file.write_text("data")

        with pytest.raises(DataLoadError, match="Unsupported"):
            FileLoader(data_dir=str(tmp_path)).load_posts(test_file)

    def test_bad_json(self, tmp_path):
        """Test a JSON file that does not hold posts."""
        test_file = tmp_path / "posts.json"
        test_file.write_text(json.dumps({"posts": "nope"}))

        with pytest.raises(DataLoadError):
            FileLoader(data_dir=str(tmp_path)).load_posts(test_file)

    def test_load_response(self, tmp_path):
        """Test reading a saved AI answer."""
        test_file = tmp_path / "answer.md"
        test_file.write_text("### Metrics\nLikes: 5\n")

        text = FileLoader(data_dir=str(tmp_path)).load_response("answer.md")

        assert text.startswith("### Metrics")

    def test_load_response_missing(self, tmp_path):
        """Test reading a missing answer file."""
        with pytest.raises(DataLoadError):
            FileLoader(data_dir=str(tmp_path)).load_response(tmp_path / "nope.md")
