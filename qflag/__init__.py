"""Command-line flags with paired long and short names, subcommands and generated help."""

__version__ = "0.1.0"

__all__ = ["cmd", "commandline", "errors", "flags", "flagset", "help", "registry", "types"]