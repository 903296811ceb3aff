"""Response Schema - Bilingual commit message and changelog structures."""

import json
from dataclasses import dataclass, field, asdict

from dualcommit.errors import SchemaParseError

BREAKING_CHANGE_SENTINEL = "Breaking change"
TRANSLATION_PLACEHOLDER = "[Translation needed]"

# Key synonyms models use for the commit type, checked in order
COMMIT_TYPE_KEYS = ("commit_type", "type")


def _load_object(text: str, what: str) -> dict:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaParseError(f"Invalid JSON for {what} ({e.msg} at line {e.lineno} column {e.colno})", text) from e
    if not isinstance(data, dict):
        raise SchemaParseError(f"Expected a JSON object for {what}, got {type(data).__name__}", text)
    return data


def _required_str(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        raise SchemaParseError(f"Missing field '{key}'")
    if not isinstance(value, str):
        raise SchemaParseError(f"Field '{key}' must be a string, got {type(value).__name__}")
    return value


def _optional_str(data: dict, key: str, default: str | None = None) -> str | None:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise SchemaParseError(f"Field '{key}' must be a string, got {type(value).__name__}")
    return value


def coerce_string_list(value, key: str) -> list[str]:
    """A single string becomes one item; null or absent becomes no items."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return list(value)
    raise SchemaParseError(f"Field '{key}' must be a string or an array of strings")


def coerce_breaking_change(value) -> str | None:
    """false/null -> None, true -> sentinel text, string -> itself."""
    if value is None or value is False:
        return None
    if value is True:
        return BREAKING_CHANGE_SENTINEL
    if isinstance(value, str):
        return value
    raise SchemaParseError("Field 'breaking_change' must be a boolean, a string or null")


@dataclass
class CommitMessage:
    """Bilingual conventional commit message."""
    commit_type: str
    description: str
    scope: str | None = None
    description_en: str = ""
    body: list[str] = field(default_factory=list)
    body_en: list[str] = field(default_factory=list)
    breaking_change: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> 'CommitMessage':
        if not isinstance(data, dict):
            raise SchemaParseError("Commit message must be a JSON object")

        commit_type = None
        for key in COMMIT_TYPE_KEYS:
            if data.get(key) is not None:
                commit_type = _required_str(data, key)
                break
        if commit_type is None:
            raise SchemaParseError("Missing field 'type'")

        return cls(
            commit_type=commit_type,
            scope=_optional_str(data, 'scope'),
            description=_required_str(data, 'description'),
            description_en=_optional_str(data, 'description_en', default=""),
            body=coerce_string_list(data.get('body'), 'body'),
            body_en=coerce_string_list(data.get('body_en'), 'body_en'),
            breaking_change=coerce_breaking_change(data.get('breaking_change')),
        )

    @classmethod
    def from_json(cls, text: str) -> 'CommitMessage':
        data = _load_object(text, "commit message")
        try:
            return cls.from_dict(data)
        except SchemaParseError as e:
            raise SchemaParseError(str(e), text) from e

    def to_dict(self) -> dict:
        data = asdict(self)
        data['type'] = data.pop('commit_type')
        return data

    @property
    def header(self) -> str:
        scope = f"({self.scope})" if self.scope is not None else ""
        return f"{self.commit_type}{scope}: {self.description}"

    def format_conventional(self) -> str:
        """Render as a git commit message.

        Body lines are interleaved zh/en by position. A Chinese line without an
        English counterpart gets the translation placeholder; extra English
        lines are emitted alone.
        """
        message = f"{self.header}\n{self.description_en}"

        if self.body or self.body_en:
            message += "\n\n"
            for i in range(max(len(self.body), len(self.body_en))):
                if i > 0:
                    message += "\n"
                zh = self.body[i] if i < len(self.body) else None
                en = self.body_en[i] if i < len(self.body_en) else None
                if zh is not None:
                    message += zh + "\n"
                if en is not None:
                    message += en
                elif zh is not None:
                    message += TRANSLATION_PLACEHOLDER

        if self.breaking_change is not None:
            message += f"\n\nBREAKING CHANGE: {self.breaking_change}"

        return message


@dataclass
class ChangelogCategories:
    features: list[str] = field(default_factory=list)
    fixes: list[str] = field(default_factory=list)
    improvements: list[str] = field(default_factory=list)
    others: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data) -> 'ChangelogCategories':
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise SchemaParseError("Field 'categories' must be an object")
        return cls(**{
            name: coerce_string_list(data.get(name), f"categories.{name}")
            for name in ('features', 'fixes', 'improvements', 'others')
        })


# (attribute, heading) in display order
CATEGORY_SECTIONS = [
    ('features', "✨ 新功能 / Features"),
    ('fixes', "🐛 修复 / Fixes"),
    ('improvements', "🔧 改进 / Improvements"),
    ('others', "📝 其他 / Others"),
]


@dataclass
class ChangelogSummary:
    """Bilingual summary of a range of commits."""
    title: str
    title_en: str
    highlights: list[str] = field(default_factory=list)
    highlights_en: list[str] = field(default_factory=list)
    categories: ChangelogCategories = field(default_factory=ChangelogCategories)

    @classmethod
    def from_dict(cls, data: dict) -> 'ChangelogSummary':
        if not isinstance(data, dict):
            raise SchemaParseError("Changelog summary must be a JSON object")
        return cls(
            title=_required_str(data, 'title'),
            title_en=_required_str(data, 'title_en'),
            highlights=coerce_string_list(data.get('highlights'), 'highlights'),
            highlights_en=coerce_string_list(data.get('highlights_en'), 'highlights_en'),
            categories=ChangelogCategories.from_dict(data.get('categories')),
        )

    @classmethod
    def from_json(cls, text: str) -> 'ChangelogSummary':
        data = _load_object(text, "changelog summary")
        try:
            return cls.from_dict(data)
        except SchemaParseError as e:
            raise SchemaParseError(str(e), text) from e

    def to_dict(self) -> dict:
        return asdict(self)

    def format_display(self) -> str:
        output = f"## {self.title}\n## {self.title_en}\n\n"

        if self.highlights:
            output += "### 亮点 / Highlights\n"
            for zh, en in zip(self.highlights, self.highlights_en):
                output += f"- {zh} / {en}\n"
            output += "\n"

        for attr, heading in CATEGORY_SECTIONS:
            items = getattr(self.categories, attr)
            if not items:
                continue
            output += f"### {heading}\n"
            for item in items:
                output += f"- {item}\n"
            output += "\n"

        return output
