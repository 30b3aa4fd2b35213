"""extconf list [--active]"""

from extconf.cli.output import print_result


def register(subparsers):
    p = subparsers.add_parser("list", help="List extensions and whether they are enabled")
    p.add_argument("--active", action="store_true", help="Only enabled extensions")
    p.set_defaults(handler=handle)


def handle(args, settings):
    from extconf.manager import ExtensionManager

    manager = ExtensionManager.from_settings(settings)
    result = {
        name: config.enabled
        for name, config in sorted(manager.get_extensions().items())
        if config.enabled or not args.active
    }
    print_result(result)
