"""Markdown rendering of an InsightRecord."""

from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from ..models.insights import InsightRecord


def _value(text: str, placeholder: str = "—") -> str:
    return text if text else placeholder


def render_markdown(record: InsightRecord, title: Optional[str] = None) -> str:
    """Render every field, showing defaults as-is so empty answers still read cleanly."""
    date_str = datetime.now().strftime("%B %d, %Y")
    content = f"# {title or f'Social Media Insights - {date_str}'}\n\n"

    metrics = record.metrics
    content += "---\n\n"
    content += "## 📈 Performance Metrics\n\n"
    content += f"- **Engagement Rate:** {metrics.engagement_rate}\n"
    content += f"- **Avg. Likes:** {metrics.likes}\n"
    content += f"- **Avg. Shares:** {metrics.shares}\n"
    content += f"- **Avg. Comments:** {metrics.comments}\n"
    content += f"- **Avg. Views:** {metrics.views}\n"
    content += f"- **Age Groups:** {_value(', '.join(metrics.age_groups))}\n"
    content += f"- **Gender Split:** {_value(metrics.gender_split)}\n\n"

    if record.format_insights:
        content += "---\n\n"
        content += "## 📊 Format Performance\n\n"
        for insight in record.format_insights:
            content += f"- {insight}\n"
        content += "\n"

    predictions = record.predictions
    content += "---\n\n"
    content += "## 🎯 Expected Performance\n\n"
    content += "| Likes | Shares | Comments | Views |\n"
    content += "|---|---|---|---|\n"
    content += f"| {predictions.likes} | {predictions.shares} | {predictions.comments} | {predictions.views} |\n\n"

    recs = record.recommendations
    content += "---\n\n"
    content += "## 📚 Recommendations\n\n"
    content += f"- **Best Time to Post:** {_value(recs.timing)}\n"
    content += f"- **Recommended Hashtags:** {_value(' '.join(recs.hashtags))}\n"
    content += f"- **Content Tips:** {_value(recs.content_tips)}\n"
    content += f"- **Audience:** {_value(recs.audience)}\n\n"

    content += "---\n\n"
    content += "## Analysis\n\n"
    content += f"{record.analysis or '*No analysis provided.*'}\n\n"

    content += "---\n\n"
    content += f"*Generated by Social Insights • {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}*\n"
    return content


class MarkdownReport:
    """Markdown report for one record, savable to disk."""

    def __init__(self, record: InsightRecord, title: Optional[str] = None):
        self.record = record
        self.title = title

    @property
    def content(self) -> str:
        return render_markdown(self.record, self.title)

    def save(self, output_path: Union[str, Path]) -> Path:
        """Write the report, creating parent directories as needed."""
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.content, encoding="utf-8")
        return path
