"""Command line entry points (formbot = formbot_core.cli.main:main)"""
