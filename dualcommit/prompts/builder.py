"""Prompt Builder - Construct bilingual prompts for commit messages and changelogs."""

from dataclasses import dataclass

from dualcommit import COMMIT_TYPE_NAMES
from dualcommit.git.analyzer import CommitInfo

# Diff budget in UTF-8 bytes
MAX_DIFF_SIZE = 3000

COMMIT_SYSTEM_PROMPT = (
    "You are a helpful assistant that generates git commit messages in JSON format. "
    "Reply with exactly one valid, minified JSON object."
)

CHANGELOG_SYSTEM_PROMPT = (
    "You are a helpful assistant that generates changelog summaries in JSON format. "
    "Reply with exactly one valid, minified JSON object."
)

TRUNCATION_RETRY_PROMPT = (
    "Your previous answer was truncated. Send the complete JSON object this time, "
    "keep it under 600 characters, and avoid any commentary or markdown fences."
)


@dataclass
class CommitContext:
    """Repository facts that accompany the diff."""
    branch_name: str | None = None
    file_count: int = 0
    added_lines: int = 0
    removed_lines: int = 0


@dataclass
class ChangelogContext:
    total_commits: int = 0
    date_range: str | None = None


def truncate_diff(diff: str, max_bytes: int = MAX_DIFF_SIZE) -> str:
    """Cut diff to at most max_bytes of UTF-8 without splitting a character."""
    encoded = diff.encode('utf-8')
    if len(encoded) <= max_bytes:
        return diff
    return encoded[:max_bytes].decode('utf-8', errors='ignore')


def format_commit_line(commit: CommitInfo) -> str:
    return f"- [{commit.short_id}] {commit.time:%Y-%m-%d} - {commit.summary} ({commit.author})"


class PromptBuilder:
    """Constructs the user prompts sent to the provider."""

    def __init__(self, max_diff_size: int = MAX_DIFF_SIZE):
        self.max_diff_size = max_diff_size

    def build_commit(self, diff: str, context: CommitContext) -> str:
        types = ", ".join(COMMIT_TYPE_NAMES)
        return f"""You are a Git commit message generator. Based on the following git diff, generate a bilingual (Chinese and English) structured commit message.

Context:
- Branch: {context.branch_name or "unknown"}
- Files changed: {context.file_count}
- Lines added: {context.added_lines}
- Lines removed: {context.removed_lines}

Git Diff:
```
{truncate_diff(diff, self.max_diff_size)}
```

Generate a commit message following the Conventional Commits specification with bilingual format:
- type: {types}
- scope: optional, the component or area affected
- description: 中文简要描述（50字符以内）
- description_en: English brief description (50 chars or less)
- body: 中文详细说明数组，每个元素是一条说明（如："添加了用户认证功能"、"优化了数据库查询性能"）
- body_en: English detailed explanation array, each element corresponds to Chinese version
- breaking_change: optional, if there are breaking changes

Important requirements:
1. description should be in Chinese, description_en should be its English translation
2. body and body_en should be arrays of strings, each element is one point
3. Each Chinese point in body should have a corresponding English translation in body_en
4. Keep descriptions concise and clear

Respond with a JSON object containing these fields. Example:
{{
    "type": "feat",
    "scope": "auth",
    "description": "添加用户认证功能",
    "description_en": "Add user authentication feature",
    "body": ["实现了JWT令牌验证", "添加了用户登录接口", "集成了OAuth2.0支持"],
    "body_en": ["Implement JWT token validation", "Add user login endpoint", "Integrate OAuth2.0 support"],
    "breaking_change": null
}}
"""

    def build_changelog(self, commits: list[CommitInfo], context: ChangelogContext) -> str:
        commits_text = "\n".join(format_commit_line(c) for c in commits)
        return f"""You are a changelog summarizer. Based on the following git commits, generate a bilingual (Chinese and English) changelog summary.

Context:
- Total commits: {context.total_commits}
- Date range: {context.date_range or "N/A"}

Git Commits:
```
{commits_text}
```

Generate a changelog summary with the following structure:
- title: 中文标题，简要概括这些提交的主题
- title_en: English title summarizing the theme
- highlights: 中文亮点列表，最重要的2-3个变更
- highlights_en: English highlights corresponding to Chinese
- categories: 按类型分类的变更列表（双语混合格式）
  - features: 新功能列表
  - fixes: 修复列表
  - improvements: 改进列表
  - others: 其他变更

Important:
1. Analyze commit messages to understand the changes
2. Group similar changes together
3. Use clear, concise language
4. Each item in categories should be bilingual format: "中文描述 / English description"

Respond with a JSON object. Example:
{{
    "title": "用户认证与性能优化",
    "title_en": "User Authentication and Performance Optimization",
    "highlights": ["添加了完整的用户认证系统", "优化了数据库查询性能"],
    "highlights_en": ["Added complete user authentication system", "Optimized database query performance"],
    "categories": {{
        "features": ["用户登录功能 / User login feature", "OAuth2.0 支持 / OAuth2.0 support"],
        "fixes": ["修复登录超时问题 / Fix login timeout issue"],
        "improvements": ["优化API响应速度 / Optimize API response speed"],
        "others": ["更新依赖版本 / Update dependencies"]
    }}
}}
"""
