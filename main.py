from rich.pretty import pprint

from nautilus import *


shell = Shell("mercator", title="mercator console", configuration=Configuration({"exchange": "binance"}, prefix="mercator"))
shell.add_command(eval_command())

binance = shell.scope("binance", "Utilities for accessing the Binance crypto exchange")
binance.scope("account", "Access account info")


@binance.command(
    validate=maximum_args(1),
    flags=[
        Flag("config", usage="config file (default is $HOME/.mercator.yaml)"),
        Flag("author", "a", default="YOUR NAME", usage="author name for copyright attribution"),
        Flag("license", "l", usage="name of license for the project", annotations={SUGGESTIONS: ["mit", "apache", "gpl"]}),
        Flag("viper", type=bool, default=True, usage="use Viper for configuration"),
    ],
)
def risk(session, command, args, /):
    """
    risk calculates an investment risk

    Prints the flag values the command was called with.
    """
    print_info("author", command.flags.value("author"), console=session.console)
    print_info("license", command.flags.value("license") or "none", console=session.console)
    print_info("viper", command.flags.value("viper"), console=session.console)


if __name__ == '__main__':
    pprint(shell.root)
    shell.run()
