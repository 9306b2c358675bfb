import argparse
import os


class writable_file(argparse.Action):
    """Argparse action that checks an output file can be created: the
    directory it would live in must exist and be writable, and the path
    must not itself be a directory.
    """
    def __call__(self, parser, namespace, values, option_string=None):
        path = os.path.abspath(values)
        parent = os.path.dirname(path)

        if os.path.isdir(path):
            parser.error("%s: %s is a directory, not a file name." %
                         (option_string, values))
        if not os.path.isdir(parent):
            parser.error("%s: %s is not a valid path." %
                         (option_string, parent))
        if not os.access(parent, os.W_OK):
            parser.error("%s: %s is not a writable dir." %
                         (option_string, parent))

        setattr(namespace, self.dest, values)
