"""Console entry point installed as ``roster-scanner``."""

from .cli import app


def main():
    app(prog_name="roster-scanner")


if __name__ == "__main__":
    main()
