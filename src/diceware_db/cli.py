import click

DIST_NAME = "diceware-db"


class _MutuallyExclusiveOption(click.Option):
    """Click option that is mutually exclusive with another option."""

    def __init__(self, *args, **kwargs):
        self.mutually_exclusive = set(kwargs.pop("mutually_exclusive", []))
        super().__init__(*args, **kwargs)

    def handle_parse_result(self, ctx, opts, args):
        for name in self.mutually_exclusive:
            if name in opts and self.name in opts:
                raise click.UsageError(
                    f"--{self.name} and --{name} are mutually exclusive."
                )
        return super().handle_parse_result(ctx, opts, args)


def _load_settings(config_path, overrides: dict) -> dict:
    """Read the config file and apply CLI overrides. Raises click.ClickException on bad config."""
    import yaml
    from diceware_db.config import default_db_path, load_config, merge_config

    try:
        config = load_config(config_path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise click.ClickException(f"Invalid config: {e}")
    settings = merge_config(config, overrides)
    if not settings["db_path"]:
        settings["db_path"] = default_db_path()
    words = settings["words"]
    if isinstance(words, bool) or not isinstance(words, int) or words < 0:
        raise click.ClickException(f"Invalid config: 'words' must be a non-negative integer, got {words!r}.")
    if not isinstance(settings["strict"], bool):
        raise click.ClickException(f"Invalid config: 'strict' must be true or false, got {settings['strict']!r}.")
    retries = settings["max_busy_retries"]
    if retries is not None and (isinstance(retries, bool) or not isinstance(retries, int) or retries < 0):
        raise click.ClickException(f"Invalid config: 'max_busy_retries' must be a non-negative integer, got {retries!r}.")
    try:
        settings["busy_timeout"] = float(settings["busy_timeout"] or 0.0)
    except (TypeError, ValueError):
        raise click.ClickException(f"Invalid config: 'busy_timeout' must be a number, got {settings['busy_timeout']!r}.")
    return settings


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--db", "-d", "db_path", default=None, type=click.Path(dir_okay=False), help="Word store file. Defaults to $HOME/.diceware.db.")
@click.option("--wordlist", "-w", default=None, type=click.Path(dir_okay=False), help="Build a new word store from this word list.")
@click.option("--words", "-n", default=None, type=click.IntRange(min=0), help="Number of words in the passphrase (default: 4).")
@click.option("--strict", is_flag=True, default=False, help="Reject word lists with invalid keys or duplicate words.")
@click.option("--config", "config_path", default=None, type=click.Path(dir_okay=False), help="YAML config file. Defaults to $HOME/.diceware.yaml if present.")
@click.option("--verbose", is_flag=True, default=False, help="Log debug output.", cls=_MutuallyExclusiveOption, mutually_exclusive=["quiet"])
@click.option("--quiet", "-q", is_flag=True, default=False, help="Log warnings and errors only.", cls=_MutuallyExclusiveOption, mutually_exclusive=["verbose"])
@click.option("--log-file", default=None, type=click.Path(), help="Write log records to file.")
@click.version_option(None, "--version", "-v", package_name=DIST_NAME, message="Diceware v%(version)s")
def cli(db_path, wordlist, words, strict, config_path, verbose, quiet, log_file):
    """Generate a diceware passphrase from a word store.

    With --wordlist, a new store is built from the list first.
    """
    from diceware_db.errors import DicewareError
    from diceware_db.generate import generate
    from diceware_db.logging_config import setup_logging
    from diceware_db.store import create_store, open_store

    logger = setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)
    settings = _load_settings(
        config_path,
        {"db_path": db_path, "words": words, "strict": strict or None},
    )
    options = {
        "timeout": settings["busy_timeout"],
        "max_busy_retries": settings["max_busy_retries"],
    }

    try:
        if wordlist:
            store = create_store(settings["db_path"], wordlist, strict=settings["strict"], **options)
        else:
            store = open_store(settings["db_path"], **options)
    except DicewareError as e:
        logger.error("%s", e)
        raise click.ClickException(str(e))

    try:
        passphrase = generate(store, settings["words"])
    except DicewareError as e:
        logger.error("%s", e)
        raise click.ClickException(str(e))
    finally:
        store.close()
    click.echo(passphrase, nl=False)


if __name__ == "__main__":
    cli()
