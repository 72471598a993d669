"""
Main entry point for the content intelligence CLI
"""
from content_intel.cli import main


if __name__ == "__main__":
    main()
