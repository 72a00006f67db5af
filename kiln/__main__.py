"""``python -m kiln`` and the ``kiln`` console script."""


def main():
    from .cli import cli

    cli(prog_name="kiln")


if __name__ == "__main__":
    main()
