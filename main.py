#!/usr/bin/env python3
import argparse
import sys
from pathlib import Path

# Setup paths
project_root = Path(__file__).parent.absolute()
sys.path.insert(0, str(project_root))


def print_holes(fixture):
    from plannerate.layout.hole_grid import HoleGrid

    grid = HoleGrid.from_fixture(fixture)
    positions = grid.positions_in_units()
    print(f"\nHole grid for {fixture.name}: {len(positions)} holes, pitch {grid.pitch:g}")
    for i, position in enumerate(positions):
        print(f"  {i:3d}. {position:8.2f}")


def run_validation(fixture):
    from plannerate.persistence.fixture_validator import FixtureValidator

    is_valid, issues = FixtureValidator().validate_fixture(fixture)
    status = "valid" if is_valid else "INVALID"
    print(f"\nFixture {fixture.name} is {status} ({len(issues)} issues)")
    for issue in issues[:10]:
        print(f"  - {issue}")
    if len(issues) > 10:
        print(f"  ... and {len(issues) - 10} more issues")
    return is_valid


def run_distribution(fixture, section_ref, shelf_count, logger):
    from plannerate.persistence.repository import InMemoryLayoutRepository
    from plannerate.services.layout_service import LayoutService

    section = fixture.find_section(section_ref)
    if section is None:
        section = next((s for s in fixture.sections if s.name == section_ref), None)
    if section is None:
        raise ValueError(f"Unknown section: {section_ref}")

    service = LayoutService(fixture, InMemoryLayoutRepository(fixture))
    shelves = service.distribute_shelves(section.id, shelf_count)
    logger.info(f"Distributed {len(shelves)} shelves in section {section.name or section.id}")
    print(f"\nSection {section.name or section.id}:")
    for shelf in shelves:
        print(f"  shelf {shelf.ordering}: {shelf.position:8.2f}")


def print_report(fixture, output_dir, export):
    from plannerate.reporting.layout_report import LayoutReport

    report = LayoutReport(output_dir=output_dir)
    print("\nShelves:")
    print(report.shelf_table(fixture).to_string(index=False))
    print("\nSections:")
    print(report.section_summary(fixture).to_string(index=False))
    if export:
        print(f"\nExported: {report.export_to_json(fixture)}")
        print(f"Exported: {report.export_to_csv(fixture)}")


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description='Plannerate pegboard layout engine',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --list
  python main.py --fixture standard --holes
  python main.py --fixture standard --distribute 5 --section left
  python main.py --fixture standard --validate --report --export
        """
    )

    parser.add_argument('--fixture', '-f', default='standard',
                        help='Fixture definition name (data/fixtures/<name>_fixture.json)')
    parser.add_argument('--data-path', default='data/fixtures',
                        help='Directory holding fixture definitions')
    parser.add_argument('--output', '-o', default='output', help='Output directory for exports')
    parser.add_argument('--list', action='store_true', help='List available fixtures')
    parser.add_argument('--holes', action='store_true', help='Print the hole grid')
    parser.add_argument('--distribute', type=int, metavar='N',
                        help='Distribute N shelves over a section')
    parser.add_argument('--section', '-s', help='Section id or name for --distribute')
    parser.add_argument('--scale', type=float, help='Override the display scale factor')
    parser.add_argument('--validate', '-v', action='store_true', help='Validate the fixture')
    parser.add_argument('--report', '-r', action='store_true', help='Print shelf occupancy')
    parser.add_argument('--export', '-e', action='store_true', help='Export the report to JSON and CSV')

    args = parser.parse_args()

    from plannerate.persistence.fixture_loader import FixtureLoader
    from plannerate.utils.error_handler import PlanogramError
    from plannerate.utils.logger import get_logger

    logger = get_logger()
    loader = FixtureLoader(args.data_path)

    if args.list:
        fixtures = loader.get_available_fixtures()
        print("\nAvailable fixtures:")
        for name in fixtures:
            print(f"  - {name}")
        return 0

    try:
        fixture = loader.load_fixture(args.fixture)
        if args.scale is not None:
            fixture.scale_factor = args.scale

        if args.validate and not run_validation(fixture):
            return 1
        if args.holes:
            print_holes(fixture)
        if args.distribute is not None:
            if not args.section:
                parser.error("--distribute needs --section")
            run_distribution(fixture, args.section, args.distribute, logger)
        if args.report or args.export:
            print_report(fixture, args.output, args.export)
    except (PlanogramError, ValueError) as e:
        logger.error(f"Command failed: {e}", exc_info=True)
        print(f"\n❌ Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
