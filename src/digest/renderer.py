"""ReportRenderer for turning activity reports into email bodies."""

from html import escape

from src.activity.models import ActivityReport

from .models import MessageBody

DEFAULT_DATE_FORMAT = "%B %d, %Y"

NO_POSTS = "No new posts were published."
NO_COMMENTS = "No new comments were approved."
NO_USERS = "No new users registered."

FOOTER = "This email was generated by the Site Activity Summary service."

_BODY_STYLE = "font-family: Arial, sans-serif; color: #333;"
_TITLE_STYLE = "color: #2a7a9c;"
_HEADING_STYLE = "border-bottom: 2px solid #eee; padding-bottom: 5px;"
_FOOTER_STYLE = "font-size: 12px; color: #777;"


class ReportRenderer:
    """Renders an ActivityReport as a self-contained HTML email.

    Rendering is deterministic and has no side effects. Every category
    is always present; an empty one shows an explicit "no new ..."
    line so an empty digest is distinguishable from a broken one. All
    styles are inline and no remote resources are referenced.
    """

    def __init__(self, date_format: str = DEFAULT_DATE_FORMAT):
        """Initialize the ReportRenderer.

        Args:
            date_format: strftime format for the window dates in the header.
        """
        self._date_format = date_format

    def subject(self, report: ActivityReport) -> str:
        """Build the subject line, e.g. "My Site - Site Activity Summary for Last 7 Days"."""
        return f"{report.site_name} - Site Activity Summary for {report.period.label}"

    def _date_range(self, report: ActivityReport) -> str:
        start = report.period.start.strftime(self._date_format)
        end = report.period.end.strftime(self._date_format)
        return f"{start} - {end}"

    def _section(self, heading: str, lines: list[str], placeholder: str) -> list[str]:
        parts = [f"<h2 style='{_HEADING_STYLE}'>{heading} ({len(lines)})</h2>"]
        if lines:
            parts.append("<ul>")
            parts.extend(f"<li>{line}</li>" for line in lines)
            parts.append("</ul>")
        else:
            parts.append(f"<p>{placeholder}</p>")
        return parts

    def render_html(self, report: ActivityReport) -> str:
        """Format a report as an HTML document.

        Args:
            report: ActivityReport to format.

        Returns:
            HTML string with inline styles.
        """
        site = escape(report.site_name)
        post_lines = [
            f"<a href='{escape(item.url)}'>{escape(item.title)}</a> by {escape(item.author)}"
            for item in report.new_items
        ]
        comment_lines = [
            f"Comment by <strong>{escape(c.author_name)}</strong> on "
            f"<a href='{escape(c.url)}'>{escape(c.parent_item_title)}</a>"
            for c in report.new_comments
        ]
        user_lines = [
            f"{escape(a.display_name)} ({escape(a.email)})" for a in report.new_accounts
        ]

        parts = [
            f"<html><body style='{_BODY_STYLE}'>",
            f"<h1 style='{_TITLE_STYLE}'>Site Activity Summary for {site}</h1>",
            f"<p>Here is the activity summary for the <strong>{escape(report.period.label)}</strong> "
            f"({escape(self._date_range(report))}).</p>",
        ]
        parts += self._section("New Posts", post_lines, NO_POSTS)
        parts += self._section("New Comments", comment_lines, NO_COMMENTS)
        parts += self._section("New Users", user_lines, NO_USERS)
        parts.append(f"<hr><p style='{_FOOTER_STYLE}'>{FOOTER}</p>")
        parts.append("</body></html>")
        return "".join(parts)

    def render_text(self, report: ActivityReport) -> str:
        """Format a report as plain text.

        Args:
            report: ActivityReport to format.

        Returns:
            Formatted plain text string.
        """
        separator = "=" * 40
        lines = [
            separator,
            f"  Site Activity Summary for {report.site_name}",
            f"  {report.period.label} ({self._date_range(report)})",
            separator,
        ]

        sections = [
            ("New Posts", [f"- {i.title} by {i.author} <{i.url}>" for i in report.new_items], NO_POSTS),
            (
                "New Comments",
                [f"- Comment by {c.author_name} on {c.parent_item_title} <{c.url}>" for c in report.new_comments],
                NO_COMMENTS,
            ),
            ("New Users", [f"- {a.display_name} ({a.email})" for a in report.new_accounts], NO_USERS),
        ]
        for heading, entries, placeholder in sections:
            lines.append("")
            lines.append(f"--- {heading} ({len(entries)}) ---")
            lines.extend(entries or [placeholder])

        lines.append("")
        lines.append(separator)
        lines.append(FOOTER)
        return "\n".join(lines)

    def render(self, report: ActivityReport) -> MessageBody:
        """Render subject, HTML and plain text for ``report``."""
        return MessageBody(
            subject=self.subject(report),
            html=self.render_html(report),
            text=self.render_text(report),
        )
