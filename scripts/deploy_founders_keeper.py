#!/usr/bin/env python3
import sys

from deployment.cli import main

if __name__ == "__main__":
    sys.exit(main(["founders-keeper"] + sys.argv[1:]))
