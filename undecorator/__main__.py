"""Entry point for running undecorator as a module."""

from .cli import main

if __name__ == "__main__":
    main()
