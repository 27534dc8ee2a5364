"""Command-line entry point for the vcf_grpaf package."""

from vcf_grpaf.cli import main as _workflow_main


def main() -> None:
    """Execute the vcf_grpaf command-line interface."""

    _workflow_main()


if __name__ == "__main__":  # pragma: no cover - entry point
    main()
