import sys
import argparse
import importlib

import fastkmedoids

# app name -> module providing main(argv)
APPS = {
    'cluster': 'fastkmedoids.apps.cluster',
}


def identify_app(argv):

    parser = argparse.ArgumentParser(
        prog='fastkmedoids',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        description="Main entry point for fastkmedoids apps.")

    parser.add_argument(
        '--version', action='version',
        version='%(prog)s ' + fastkmedoids.__version__)

    parser.add_argument(
        "appname",
        choices=sorted(APPS),
        help="Name of the application.")

    parser.add_argument(
        "appargs", nargs=argparse.REMAINDER,
        help="Subsequent arguments to the app (add subcommand for more).")

    args = parser.parse_args(argv[1:])

    args.main = importlib.import_module(APPS[args.appname]).main
    # apps parse argv[1:], so the app name stands in for argv[0]
    args.appargs = [args.appname] + args.appargs

    return args


def main(argv=None):

    if argv is None:
        argv = list(sys.argv)

    args = identify_app(argv)

    try:
        args.main(args.appargs)
    except Exception:
        message = ("An unexpected error has occurred while running "
                   "'fastkmedoids %s'." % args.appname)
        print(message, file=sys.stderr)
        raise

    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
