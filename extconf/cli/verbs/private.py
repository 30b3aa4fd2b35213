"""extconf private <name>"""

from extconf.cli.output import die, print_result


def register(subparsers):
    p = subparsers.add_parser("private", help="Show the private section of an extension")
    p.add_argument("name", help="Extension (directory) name")
    p.set_defaults(handler=handle)


def handle(args, settings):
    from extconf.errors import NotRegisteredError
    from extconf.manager import ExtensionManager

    manager = ExtensionManager.from_settings(settings)
    try:
        private = manager.get_private_config(args.name)
    except NotRegisteredError as e:
        die(e.message)
    print_result(private.to_dict())
