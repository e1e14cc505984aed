"""Allow ``python -m cmdlets`` invocation."""

from cmdlets.cli.main import main

if __name__ == "__main__":
    main()
