"""Script entry point for running the Crowdin client CLI from a checkout

Installed copies use the ``crowdin-client`` console script instead.
"""

from cli.main import main

if __name__ == "__main__":
    main()
