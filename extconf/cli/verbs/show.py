"""extconf show <name>"""

from extconf.cli.output import die, print_result


def register(subparsers):
    p = subparsers.add_parser("show", help="Show the resolved configuration of an extension")
    p.add_argument("name", help="Extension (directory) name")
    p.set_defaults(handler=handle)


def handle(args, settings):
    from extconf.manager import ExtensionManager

    manager = ExtensionManager.from_settings(settings)
    config = manager.get_extension_config(args.name)
    if config is None:
        die(f"extension not registered: {args.name}")
    print_result(config.to_dict())
