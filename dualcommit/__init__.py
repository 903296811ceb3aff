"""
dualcommit

Bilingual (Chinese / English) commit messages and changelogs from git history.
"""

__version__ = "0.3.0"

# Conventional commit kinds offered to the model. Responses are not validated
# against this list.
COMMIT_TYPES = {
    'feat': 'A new feature or capability',
    'fix': 'A bug fix',
    'docs': 'Documentation only changes',
    'style': 'Formatting, whitespace, no code change',
    'refactor': 'Code restructuring without behavior change',
    'test': 'Adding or updating tests',
    'chore': 'Maintenance tasks, dependencies, tooling',
    'perf': 'Performance improvement',
}

COMMIT_TYPE_NAMES = list(COMMIT_TYPES.keys())
