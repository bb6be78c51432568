"""
Example demonstrating planet generation and rollups for a seed.
"""

import sys

from py_dynmap.core import (
    TOTAL_POPULATION,
    compute_global_totals,
    compute_region_totals,
    generate_all_cells_rebalanced,
    get_resource_profile,
)


def main():
    seed = sys.argv[1] if len(sys.argv) > 1 else "TOI-700"

    print(f"Generating planet for seed {seed!r}...")
    cells = generate_all_cells_rebalanced(seed)

    totals = compute_global_totals(cells)
    print(f"Cells: {totals.cell_count:,}")
    print(f"Population: {totals.total:,} (target {TOTAL_POPULATION:,})")
    print(f"Urban cells: {totals.urban_cell_fraction:.1%}")
    print(f"Avg urban cell: {totals.average_urban_cell_population:,.0f} hab")
    print(f"Avg rural cell: {totals.average_rural_cell_population:,.0f} hab")

    print("\nRegions:")
    for region in compute_region_totals(cells):
        print(
            f"  {region.region_id:>2} {region.region_name:<24} "
            f"{region.cell_count:>6,} cells  {region.total_population:>15,} hab  "
            f"{region.density:6.1f} hab/km²"
        )

    print("\nFirst cells:")
    for cell in cells[:5]:
        profile = get_resource_profile(cell)
        print(
            f"  #{cell.id:<3} {cell.region_name:<24} {cell.type.value:<5} "
            f"fert={cell.fertility:.2f} pop={cell.population_total:,} ({profile.label})"
        )


if __name__ == "__main__":
    main()
