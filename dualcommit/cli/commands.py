"""CLI Commands"""

import os
import sys

from dualcommit.config import ConfigError, get_config_path, init_config, load_config
from dualcommit.git import GitAnalyzer
from dualcommit.output import CHECK, CROSS, blue, bold, dim, error, info, print_error, print_info, print_success, success, warning

ENV_OVERRIDES = ('GCM_PROVIDER', 'GCM_MODEL', 'GCM_BASE_URL')


def display_config() -> int:
    """Display current configuration."""
    config = load_config()
    config_path = get_config_path()

    print(f"\n{bold('Current Configuration')}\n")

    if config_path:
        print(f"  {dim('Loaded from:')} {config_path}")
    else:
        print(f"  {dim('Loaded from:')} defaults (no .gcmrc found)")

    overrides = [(name, os.environ[name]) for name in ENV_OVERRIDES if os.environ.get(name)]
    if overrides:
        print(f"  {dim('Environment overrides:')}")
        for name, value in overrides:
            print(f"    {name}={value}")

    key_state = "set" if config.get_api_key() else "not set"
    print()
    print(f"  {bold('Settings:')}")
    print(f"    provider:    {info(config.provider)}")
    print(f"    model:       {info(config.model)}")
    print(f"    base_url:    {info(config.base_url or 'default')}")
    print(f"    max_tokens:  {info(str(config.max_tokens))}")
    print(f"    api_key_env: {info(config.api_key_env)} ({key_state})")
    print(f"    auto_stage:  {info(str(config.auto_stage).lower())}")

    print(f"\n  {dim('Config locations:')}")
    print(f"    Local:  .gcmrc (in current directory)")
    print(f"    Global: ~/.gcmrc")
    print(f"\n  {dim('Run')} gcm init {dim('to create one')}\n")

    return 0


def run_init(local: bool, force: bool) -> int:
    try:
        path = init_config(local=local, force=force)
    except ConfigError as e:
        print_error(str(e))
        return 1
    except OSError as e:
        print_error(f"Could not write config: {e}")
        return 1

    print_success(f"Configuration file created at: {path}")
    print()
    print(bold("Next steps:"))
    print("  1. Edit the config file to set your API provider and model")
    print("  2. Set your API key either:")
    print("     - In the environment variable (recommended)")
    print("     - Directly in the config file (not recommended)")
    print()
    print("  Example:")
    print('  export OPENAI_API_KEY="your-api-key"')
    print("  # or")
    print('  export ANTHROPIC_API_KEY="your-api-key"')
    return 0


def run_install_completion() -> int:
    """Show shell tab completion setup."""
    shell = os.environ.get('SHELL', '')

    print(f"\n{bold('Tab Completion Setup')}\n")

    if 'zsh' in shell or 'bash' in shell:
        rc_file = os.path.expanduser('~/.zshrc' if 'zsh' in shell else '~/.bashrc')
        print(f"Add this line to {dim(rc_file)}:\n")
        print('  eval "$(register-python-argcomplete gcm)"\n')
        print(f"Then run: {dim('source ' + rc_file)}")
    elif sys.platform == 'win32':
        print("For PowerShell, run:\n")
        print("  register-python-argcomplete --shell powershell gcm | Out-String | Invoke-Expression\n")
        print("To make it permanent, add the same line to your $PROFILE")
    else:
        print("Run one of these based on your shell:\n")
        print(f"  {dim('# Bash/Zsh')}")
        print('  eval "$(register-python-argcomplete gcm)"\n')
        print(f"  {dim('# Fish')}")
        print("  register-python-argcomplete --shell fish gcm | source")

    print(f"\n{dim('After setup, press TAB to autocomplete commands and flags.')}")
    return 0


def _print_file_group(title: str, files: list[str], marker: str) -> None:
    if not files:
        return
    print(f"{title}:")
    for path in files:
        print(f"  {marker} {path}")
    print()


def run_status(analyzer: GitAnalyzer, verbose: bool) -> int:
    print(f"{bold('Checking:')} {analyzer.path or os.getcwd()}")
    print()
    print(f"{success(bold('Git repository detected'))} {success(CHECK)}")

    status = analyzer.get_status()
    if status.is_clean:
        print(f"{success(bold('Working tree clean'))} {success(CHECK)}")
        print("All changes have been committed.")
    else:
        print(f"{warning(bold('Uncommitted changes detected'))} {warning(CROSS)}")
        print()
        _print_file_group(warning("Modified files"), status.modified_files, warning('M'))
        _print_file_group(success("New files"), status.new_files, success('A'))
        _print_file_group(error("Deleted files"), status.deleted_files, error('D'))
        _print_file_group(blue("Renamed files"), status.renamed_files, blue('R'))
        print(f"{bold('Total uncommitted changes')}: {warning(str(status.total_changes))}")

        if verbose:
            print()
            print(info("Tip: Use 'git add .' to stage all changes"))
            print(info("     Use 'gcm commit' to generate an AI commit message"))

    print()
    branch = analyzer.get_branch_name()
    if branch:
        print(f"{bold('Current branch')}: {info(branch)}")
    else:
        print(f"{warning(bold('HEAD state'))}: detached")
    return 0


def run_diff(analyzer: GitAnalyzer, staged: bool) -> int:
    if staged:
        print(success(bold("Showing staged changes:")))
        diff = analyzer.get_diff(staged=True)
    else:
        print(success(bold("Showing all changes:")))
        diff = analyzer.get_combined_diff()

    if not diff:
        print_info("No changes to show")
    else:
        print(diff)
    return 0
