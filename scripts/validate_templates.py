# scripts/validate_templates.py
"""
Validate all workflow templates listed in settings.json (SETTINGS_FILE).
Same as `template-validator check`; exits 0 / 1 (invalid or unhandled error) / 2 (configuration).
Run: python scripts/validate_templates.py [settings.json]
"""

import sys

from template_validator.cli import cli


def main() -> None:
    args = ["check"]
    if len(sys.argv) > 1:
        args += ["--settings-file", sys.argv[1]]
    cli(args, prog_name="validate_templates")


if __name__ == "__main__":
    main()
