"""
Management command to print a draft dashboard specification.

Builds the same draft the configurator would start from, so catalog and preset
changes can be checked without going through the UI.

Usage:
    python manage.py dashboard_preset loyalty
    python manage.py dashboard_preset membership --preset=full --capabilities=membership,allowances
    python manage.py dashboard_preset store_card --list
"""

import json

from django.core.management.base import BaseCommand, CommandError

from walletpass.member_dashboard.catalog import Preset, ProgramType, get_sections_for_program_type
from walletpass.member_dashboard.session import ConfiguratorSession
from walletpass.member_dashboard.types import TemplateDescriptor


class Command(BaseCommand):
    help = "Print a catalog-compliant draft dashboard specification for a program type"

    def add_arguments(self, parser):
        parser.add_argument("program_type", choices=[str(t) for t in ProgramType])
        parser.add_argument(
            "--preset",
            type=str,
            default=str(Preset.standard),
            choices=[str(p) for p in Preset],
            help="Which preset to apply (default: standard)",
        )
        parser.add_argument(
            "--capabilities",
            type=str,
            default="",
            help="Comma-separated capabilities declared by the template",
        )
        parser.add_argument(
            "--list",
            action="store_true",
            help="List the sections available for the program type and capabilities",
        )

    def handle(self, *args, **options):
        program_type = ProgramType(options["program_type"])
        capabilities = frozenset(c.strip() for c in options["capabilities"].split(",") if c.strip())

        if options["list"]:
            self.stdout.write(f"\nSections available for {program_type}:\n")
            for item in get_sections_for_program_type(program_type, capabilities):
                self.stdout.write(f"  {item.key} ({item.category}): {item.label}")
            return

        template = TemplateDescriptor.build(id="cli", capabilities=capabilities)
        session = ConfiguratorSession()
        session.initialize_draft_spec(template, program_type)
        result = session.reset_sections(options["preset"])
        if not result.ok:
            raise CommandError(result.detail)
        if result.detail:
            self.stderr.write(self.style.WARNING(result.detail))

        self.stdout.write(json.dumps(session.draft_spec.to_dict(), indent=2))
