from .click import cli, dh_makeshlibs


def main():
    cli()
