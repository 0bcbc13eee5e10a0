"""Command-line interface for kinesis_reader."""
