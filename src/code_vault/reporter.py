# Code Vault - Personal code snippet vault with similarity search
# Copyright (C) 2025  Jonathan Louis
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Report generator - formats vault results for output.

Supports text, markdown, and json output formats.
"""

from typing import Any, Dict, List
from enum import Enum
import json
from datetime import datetime

from .models import Snippet, SnippetCluster


class OutputFormat(Enum):
    TEXT = "text"
    MARKDOWN = "markdown"
    JSON = "json"


# Extension to output format mapping for -o FILE.EXT
EXTENSION_FORMAT_MAP = {
    '.md': OutputFormat.MARKDOWN,
    '.json': OutputFormat.JSON,
    '.txt': OutputFormat.TEXT,
}

MAX_CODE_LINES = 15


def report_analysis(response: Dict[str, Any], output_format: OutputFormat = OutputFormat.TEXT) -> str:
    """
    Render an analyze() response.

    Args:
        response: {"suggestions": [...], "analysis": {...}} as built by VaultService.analyze
        output_format: Desired output format
    """
    if output_format == OutputFormat.JSON:
        return json.dumps(response, indent=2)

    analysis = response["analysis"]
    suggestions = response["suggestions"]
    markdown = output_format == OutputFormat.MARKDOWN
    lines = []

    if markdown:
        lines.append("# Similar Snippets")
        lines.append("")
        lines.append(f"**Compared against:** {analysis['totalSnippets']} snippets  ")
        lines.append(f"**Matches:** {analysis['relevantMatches']}  ")
        lines.append(f"**Detected language:** {analysis['language']}")
        lines.append("")
    else:
        lines.append(f"🔍 {analysis['relevantMatches']} matches among {analysis['totalSnippets']} snippets")
        lines.append(f"   Detected language: {analysis['language']}")
        lines.append("")

    if not suggestions:
        lines.append("No similar snippets found.")
        return "\n".join(lines)

    for rank, suggestion in enumerate(suggestions, start=1):
        snippet = suggestion["snippet"]
        if markdown:
            lines.append(f"## {rank}. {snippet['title']} ({suggestion['confidence']:.0%})")
            lines.append("")
            lines.append(f"- **Reason:** {suggestion['reason']}")
            lines.append(f"- **Context:** {suggestion['context']}")
            lines.append(f"- **Language:** {snippet['language']}")
            lines.append(f"- **ID:** `{snippet['id']}`")
            lines.append("")
            lines.extend(_code_block(snippet["code"], snippet["language"]))
        else:
            lines.append(f"{rank}. {snippet['title']}  [{suggestion['confidence']:.0%}]")
            lines.append(f"   └─ {suggestion['reason']}")
            lines.append(f"   └─ {suggestion['context']}")
            lines.append(f"   └─ {snippet['language']} · {snippet['id']}")
        lines.append("")

    return "\n".join(lines)


def report_snippets(snippets: List[Snippet], output_format: OutputFormat = OutputFormat.TEXT) -> str:
    """Render a snippet listing."""
    if output_format == OutputFormat.JSON:
        return json.dumps([s.to_dict() for s in snippets], indent=2)

    if not snippets:
        return "No snippets found."

    lines = []
    if output_format == OutputFormat.MARKDOWN:
        lines.append("| Title | Language | Tags | Created | ID |")
        lines.append("|-------|----------|------|---------|----|")
        for s in snippets:
            tags = ", ".join(s.tags) or "-"
            lines.append(f"| {s.title} | {s.language} | {tags} | {s.created_at:%Y-%m-%d} | `{s.id}` |")
        return "\n".join(lines)

    for s in snippets:
        tags = f" #{' #'.join(s.tags)}" if s.tags else ""
        lines.append(f"• {s.title}  ({s.language}){tags}")
        lines.append(f"  {s.id} · {s.preview(60)}")
    return "\n".join(lines)


def report_snippet(snippet: Snippet, output_format: OutputFormat = OutputFormat.TEXT) -> str:
    """Render one snippet in full."""
    if output_format == OutputFormat.JSON:
        return json.dumps(snippet.to_dict(), indent=2)

    lines = []
    if output_format == OutputFormat.MARKDOWN:
        lines.append(f"# {snippet.title}")
        lines.append("")
        if snippet.description:
            lines.append(snippet.description)
            lines.append("")
        lines.append(f"**Language:** {snippet.language}  ")
        lines.append(f"**Tags:** {', '.join(snippet.tags) or '-'}  ")
        lines.append(f"**Created:** {snippet.created_at:%Y-%m-%d %H:%M}")
        if snippet.updated_at:
            lines.append(f"**Updated:** {snippet.updated_at:%Y-%m-%d %H:%M}")
        lines.append("")
        lines.extend(_code_block(snippet.code, snippet.language, max_lines=None))
        return "\n".join(lines)

    lines.append("━" * 70)
    lines.append(f"{snippet.title}  ({snippet.language})")
    lines.append(f"ID: {snippet.id}")
    if snippet.tags:
        lines.append(f"Tags: {', '.join(snippet.tags)}")
    if snippet.description:
        lines.append(f"Description: {snippet.description}")
    created = f"Created: {snippet.created_at:%Y-%m-%d %H:%M}"
    if snippet.updated_at:
        created += f" | Updated: {snippet.updated_at:%Y-%m-%d %H:%M}"
    lines.append(created)
    lines.append("━" * 70)
    for code_line in snippet.code.split("\n"):
        lines.append(f"   │ {code_line}")
    return "\n".join(lines)


def report_clusters(clusters: List[SnippetCluster], threshold: float, output_format: OutputFormat = OutputFormat.TEXT) -> str:
    """Render related-snippet clusters."""
    if output_format == OutputFormat.JSON:
        return _format_clusters_json(clusters, threshold)

    markdown = output_format == OutputFormat.MARKDOWN
    lines = []

    if markdown:
        lines.append("# Related Snippets")
        lines.append("")
        lines.append(f"**Threshold:** {threshold:.0%}  ")
        lines.append(f"**Clusters Found:** {len(clusters)}")
        lines.append("")
    else:
        lines.append(f"🔗 Found {len(clusters)} clusters of related snippets")
        lines.append(f"   Threshold: {threshold:.0%}")
        lines.append("")

    for cluster in clusters:
        rep = cluster.representative
        if markdown:
            lines.append(f"## Cluster {cluster.id}: {cluster.similarity_score:.0%} Similarity")
            lines.append("")
            lines.append("| Title | Language | ID |")
            lines.append("|-------|----------|----|")
            for s in cluster.snippets:
                lines.append(f"| {s.title} | {s.language} | `{s.id}` |")
            lines.append("")
            lines.append(f"Representative: **{rep.title}**")
            lines.append("")
            lines.extend(_code_block(rep.code, rep.language))
            lines.append("")
        else:
            lines.append("━" * 70)
            lines.append(f"Cluster #{cluster.id}: Similarity {cluster.similarity_score:.0%}")
            lines.append(f"Snippets: {cluster.size} | Lines: {cluster.total_lines()} | Languages: {', '.join(cluster.languages)}")
            lines.append("━" * 70)
            for s in cluster.snippets:
                marker = "★" if s is rep else "•"
                lines.append(f"   {marker} {s.title}  ({s.id})")
            lines.append("")

    return "\n".join(lines)


def _format_clusters_json(clusters: List[SnippetCluster], threshold: float) -> str:
    data = {
        "meta": {
            "threshold": threshold,
            "cluster_count": len(clusters),
            "timestamp": datetime.now().isoformat(),
        },
        "clusters": [
            {
                "id": cluster.id,
                "similarity": round(cluster.similarity_score, 4),
                "size": cluster.size,
                "languages": cluster.languages,
                "representative": cluster.representative.id,
                "snippets": [
                    {"id": s.id, "title": s.title, "language": s.language, "preview": s.preview(80)}
                    for s in cluster.snippets
                ],
            }
            for cluster in clusters
        ],
    }
    return json.dumps(data, indent=2)


def _code_block(code: str, language: str, max_lines=MAX_CODE_LINES) -> List[str]:
    code_lines = code.split("\n")
    lines = [f"```{language}"]
    if max_lines is not None and len(code_lines) > max_lines:
        lines.extend(code_lines[:max_lines])
        lines.append("// ... (truncated)")
    else:
        lines.extend(code_lines)
    lines.append("```")
    return lines
