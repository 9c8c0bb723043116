import argparse
import cli.config
import cli.extract
import cli.status
import cli.transcribe


def create_parser():
    parser = argparse.ArgumentParser(
        prog='folio',
        description='Folio - Capture e-books from a web reader and transcribe them to text',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Configuration (run first!)
  folio config init                       # Create config.yaml
  folio config show
  folio config set extraction.max_reissues 15
  folio config transcriber list
  folio config transcriber add gemini --type openrouter --model google/gemini-2.0-flash-001

  # Extraction
  folio extract B00EXAMPLE
  folio extract --input ids.csv --headless
  folio extract B00EXAMPLE --pages 10 --no-restore-position

  # Transcription
  folio transcribe                        # Every extracted book
  folio transcribe B00EXAMPLE --transcriber gemini --workers 4
  folio transcribe B00EXAMPLE --force

  # Library
  folio status
  folio status --json
"""
    )

    subparsers = parser.add_subparsers(dest='command', help='Command')
    subparsers.required = True

    cli.config.setup_parser(subparsers)
    cli.extract.setup_parser(subparsers)
    cli.transcribe.setup_parser(subparsers)
    cli.status.setup_parser(subparsers)

    return parser


def main():
    parser = create_parser()
    args = parser.parse_args()
    args.func(args)
