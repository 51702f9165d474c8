# SPDX-License-Identifier: MIT
"""
secure-commit - Command Line Interface

This CLI provides:
- secure-commit scan [root] --format {text,json,sarif}
- secure-commit check                 (pre-commit hook: scan staged files)
- secure-commit install|uninstall     (manage the pre-commit hook)
- secure-commit init|preview          (.gitignore + hook setup)
- secure-commit clean                 (untrack committed sensitive files)
- secure-commit config --init         (write a .secure-commit.yml template)
- secure-commit version
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from . import __version__
from .core.exceptions import ConfigError, SecureCommitError
from .core.findings import ScanResult, Severity

LOG_FORMAT = "[secure-commit] %(levelname)s: %(message)s"

SEVERITY_ICONS = {Severity.HIGH: "🚨", Severity.MEDIUM: "⚠️ ", Severity.LOW: "💡"}


def build_parser():
    p = argparse.ArgumentParser(prog="secure-commit", description="Keep secrets out of git")
    p.add_argument("-v", "--version", action="store_true", help="print version and exit")
    p.add_argument("--verbose", action="store_true", help="enable debug logging")

    sub = p.add_subparsers(dest="cmd")
    sub.add_parser("version", help="print version")

    sp = sub.add_parser("scan", help="scan a project directory for secrets")
    sp.add_argument("root", nargs="?", default=".", help="path to scan")
    _add_output_args(sp)

    cp = sub.add_parser("check", help="scan staged files (used by the pre-commit hook)")
    cp.add_argument("--project", default=".", help="repository root (default: .)")
    _add_output_args(cp)

    ip = sub.add_parser("install", help="install the git pre-commit hook")
    ip.add_argument("--force", action="store_true", help="overwrite an existing hook")
    ip.add_argument("--project", default=".", help="repository root (default: .)")

    up = sub.add_parser("uninstall", help="remove the git pre-commit hook")
    up.add_argument("--project", default=".", help="repository root (default: .)")

    inp = sub.add_parser("init", help="update .gitignore and install the hook")
    inp.add_argument("--project", default=".", help="project root (default: .)")

    pp = sub.add_parser("preview", help="preview .gitignore changes")
    pp.add_argument("--project", default=".", help="project root (default: .)")

    clp = sub.add_parser("clean", help="stop tracking committed sensitive files")
    clp.add_argument("--dry-run", "--preview", dest="dry_run", action="store_true",
                     help="show what would be removed without changing anything")
    clp.add_argument("--force", action="store_true", help="also untrack files with uncommitted changes")
    clp.add_argument("--project", default=".", help="repository root (default: .)")

    cfg = sub.add_parser("config", help="manage the scanner config file")
    cfg.add_argument("--init", action="store_true", help="write a .secure-commit.yml template")
    cfg.add_argument("--project", default=".", help="project root (default: .)")
    return p


def _add_output_args(sp):
    sp.add_argument(
        "--format",
        choices=["text", "json", "sarif"],
        default="text",
        help="output format (default: text)"
    )
    sp.add_argument("--config", help="path to a scanner config YAML file")
    sp.add_argument("--json-out", dest="json_out", help="write JSON results to file")
    sp.add_argument("--sarif-out", dest="sarif_out", help="write SARIF results to file")


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    p = build_parser()
    args = p.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )

    if args.version or args.cmd == "version":
        print(__version__)
        return 0

    handlers = {
        "scan": handle_scan_command,
        "check": handle_check_command,
        "install": handle_install_command,
        "uninstall": handle_uninstall_command,
        "init": handle_init_command,
        "preview": handle_preview_command,
        "clean": handle_clean_command,
        "config": handle_config_command,
    }
    handler = handlers.get(args.cmd)
    if handler is None:
        p.print_help()
        return 0

    try:
        return handler(args)
    except ConfigError as e:
        print(f"CONFIG ERROR: {e}", file=sys.stderr)
        return 1
    except SecureCommitError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


# -- scanning ---------------------------------------------------------
def _load_walker(config_path, project_root):
    from .scanner.config import load_scanner_config, build_walker

    return build_walker(load_scanner_config(config_path, repo_root=project_root))


def handle_scan_command(args):
    """Handle the scan subcommand."""
    from .vcs.gateway import GitGateway, find_tracked_sensitive_files
    from .vcs.gitignore import detect_frameworks

    walker = _load_walker(args.config, args.root)
    result = walker.walk(args.root)
    tracked = find_tracked_sensitive_files(GitGateway(args.root))

    report = {"root": str(Path(args.root).resolve()), **result.to_dict(), "tracked_sensitive_files": tracked}

    if args.format == "text":
        print("🛡️  secure-commit - protecting your secrets\n")
        print(f"📦 Detected: {', '.join(detect_frameworks(args.root))}\n")
        print_findings(result)
        print_tracked_files(tracked)
        if not result and not tracked:
            print("\n🎉 Your project looks secure!")
            print("💡 Run `secure-commit install` to set up prevention hooks")

    write_outputs(args, report, result)
    return result.exit_code


def handle_check_command(args):
    """Scan the staged files; non-zero exit blocks the commit."""
    from .vcs.gateway import GitGateway

    gateway = GitGateway(args.project)
    walker = _load_walker(args.config, args.project)
    top = gateway.top_level()
    staged = gateway.staged_files()
    result = walker.scan_files(staged, root=top)

    if args.format == "text":
        print_findings(result)
        if result:
            print("🚫 Commit blocked. Remove the secrets above or move them to a .env file.")
            print("💡 Bypass only if you are sure: git commit --no-verify")

    report = {"root": str(top), "staged": len(staged), **result.to_dict()}
    write_outputs(args, report, result)
    return result.exit_code


def write_outputs(args, report, result):
    from .sarif.export import build_sarif

    if args.format == "json" or args.json_out:
        json_output = json.dumps(report, indent=2)
        if args.json_out:
            Path(args.json_out).write_text(json_output, encoding="utf-8")
            if args.format == "text":
                print(f"JSON output written to {args.json_out}")
        if args.format == "json":
            print(json_output)

    if args.format == "sarif" or args.sarif_out:
        sarif_json = json.dumps(build_sarif(result), indent=2)
        if args.sarif_out:
            Path(args.sarif_out).write_text(sarif_json, encoding="utf-8")
            if args.format == "text":
                print(f"SARIF output written to {args.sarif_out}")
        if args.format == "sarif":
            print(sarif_json)


def print_findings(result: ScanResult) -> bool:
    """Print findings grouped by severity. Returns True if anything was found."""
    if not result:
        print("✅ No secrets detected!")
    else:
        print(f"❌ Found {result.total} potential secret(s):\n")
        for severity, findings in result.by_severity().items():
            print(f"{SEVERITY_ICONS[severity]} {severity.value.upper()} RISK:\n")
            for finding in findings:
                print(f"   {finding.description}")
                print(f"   📁 {finding.path}:{finding.line}")
                print(f"   🔑 {finding.preview}")
                print(f"   💡 {finding.remediation}\n")

    if result.warnings:
        print(f"⚠️  {len(result.warnings)} path(s) could not be scanned:")
        for warning in result.warnings[:5]:
            print(f"   - {warning}")
        if len(result.warnings) > 5:
            print(f"   ... and {len(result.warnings) - 5} more")
    return bool(result)


def print_tracked_files(tracked) -> bool:
    if not tracked:
        print("✅ No sensitive files tracked in git")
        return False
    print(f"🔍 Found {len(tracked)} sensitive file(s) already tracked in git:\n")
    for f in tracked:
        print(f"   📁 {f}")
    print("\n💡 Run `secure-commit clean` to remove these from git tracking\n")
    return True


# -- hooks / gitignore -----------------------------------------------
def handle_install_command(args):
    from .vcs.hooks import check_hook_installation, install_hook

    status = check_hook_installation(args.project)
    if status.installed and not args.force:
        print("✅ Git hooks are already installed")
        print(f"📄 Hook file: {status.hook_path}")
        print("\n💡 Use --force to reinstall")
        return 0

    hook = install_hook(args.project, force=args.force)
    print("✅ Git hooks installed successfully!")
    print(f"📄 Hook installed at: {hook}")
    print("\n🛡️  Your repository is now protected against secret commits")
    return 0


def handle_uninstall_command(args):
    from .vcs.hooks import uninstall_hook

    if uninstall_hook(args.project):
        print("✅ Git hooks uninstalled successfully")
    else:
        print("ℹ️  No git hooks found to uninstall")
    return 0


def handle_init_command(args):
    from .core.exceptions import HookError
    from .vcs.gitignore import detect_frameworks, update_gitignore
    from .vcs.hooks import check_hook_installation, install_hook

    frameworks = detect_frameworks(args.project)
    print(f"📦 Setting up security for: {', '.join(frameworks)}\n")

    try:
        result = update_gitignore(frameworks, args.project)
    except OSError as e:
        print(f"ERROR: Failed to update .gitignore: {e}", file=sys.stderr)
        return 1

    if result.updated:
        print(f"✅ Updated .gitignore with {len(result.added)} new pattern(s)")
        for pattern in result.added:
            print(f"   + {pattern}")
        if result.skipped:
            print(f"\n⏭️  Skipped {len(result.skipped)} existing pattern(s)")
    else:
        print("✅ .gitignore already properly configured!")

    if check_hook_installation(args.project).installed:
        print("\n✅ Git hooks already installed")
        return 0

    print("\n🪝 Installing git hooks...")
    try:
        install_hook(args.project)
    except HookError as e:
        print(f"⚠️  Failed to install hooks: {e}")
        print("💡 You can try running `secure-commit install` separately")
    else:
        print("✅ Git hooks installed successfully")
    return 0


def handle_preview_command(args):
    from .vcs.gitignore import detect_frameworks, preview_gitignore_changes

    frameworks = detect_frameworks(args.project)
    print(f"📦 Detected: {', '.join(frameworks)}\n")
    preview = preview_gitignore_changes(frameworks, args.project)
    if not preview.added:
        print("✅ .gitignore is already properly configured!")
        return 0

    print(f"📝 Would add {len(preview.added)} new pattern(s) to .gitignore:\n")
    for pattern in preview.added:
        print(f"   + {pattern}")
    if preview.skipped:
        print(f"\n✅ Already present: {', '.join(preview.skipped)}")
    print("\n💡 Run `secure-commit init` to apply these changes")
    return 0


def handle_clean_command(args):
    from .vcs.cleaner import remove_tracked_sensitive_files, validate_cleanup_safety
    from .vcs.gateway import GitGateway

    gateway = GitGateway(args.project)
    safety = validate_cleanup_safety(gateway)
    if not safety.safe:
        print("❌ Cannot proceed with cleanup:", file=sys.stderr)
        for issue in safety.issues:
            print(f"   {issue}", file=sys.stderr)
        return 1
    if safety.warnings and not args.force:
        print("⚠️  Warnings:")
        for warning in safety.warnings:
            print(f"   {warning}")
        print()

    result = remove_tracked_sensitive_files(gateway, dry_run=args.dry_run, force=args.force)
    if not (result.removed or result.skipped or result.failed):
        print("✅ No tracked sensitive files found")
        return 0

    if result.removed:
        print(f"{'🔍 Would remove' if args.dry_run else '✅ Removed'} {len(result.removed)} file(s):")
        for item in result.removed:
            print(f"   - {item.file} ({item.reason})")
        print()
    if result.skipped:
        print(f"⏭️  Skipped {len(result.skipped)} file(s):")
        for item in result.skipped:
            print(f"   - {item.file} ({item.reason})")
        print()
    if result.failed:
        print(f"❌ Failed to remove {len(result.failed)} file(s):")
        for item in result.failed:
            print(f"   - {item.file}: {item.reason}")
        print()
    for warning in result.warnings:
        print(f"⚠️  {warning}")

    if args.dry_run and result.removed:
        print("💡 Run `secure-commit clean` to actually remove these files")
    elif result.removed:
        print("💡 Files removed from git tracking but kept on disk")
        print("💡 Add these patterns to .gitignore to prevent re-tracking")
    return 0 if result.success else 1


def handle_config_command(args):
    from .scanner.config import CONFIG_FILENAMES, create_default_config_template

    if not args.init:
        print("Nothing to do. Use `secure-commit config --init` to write a template.")
        return 0
    target = Path(args.project) / CONFIG_FILENAMES[0]
    if target.exists():
        print(f"ℹ️  {target} already exists")
        return 0
    target.write_text(create_default_config_template(), encoding="utf-8")
    print(f"✅ Wrote {target}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
