"""
Planetary constants for the dynamic map.

These values are fixed for every seed; the generated cell set always
composes into exactly these totals.
"""

TOTAL_CELLS = 35_900
CELL_AREA_KM2 = 7_500
TOTAL_POPULATION = 11_000_000_000

# hab/km² over the whole land surface (~40.85)
GLOBAL_DENSITY = TOTAL_POPULATION / (TOTAL_CELLS * CELL_AREA_KM2)

# Target fraction of urban cells across the planet
BASE_URBAN_RATIO = 0.20
MIN_URBAN_PROBABILITY = 0.05
MAX_URBAN_PROBABILITY = 0.45

# Bounds shared by fertility, habitability, mineral richness and energy potential
ATTRIBUTE_MIN = 0.2
ATTRIBUTE_MAX = 2.0

# Noise amplitude around the region base for each attribute
FERTILITY_AMPLITUDE = 0.40
HABITABILITY_AMPLITUDE = 0.30
MINERAL_AMPLITUDE = 0.45
ENERGY_AMPLITUDE = 0.40

# Relative density of urban vs rural cells (~766k vs ~157k hab/cell)
URBAN_MULTIPLIER = 4.9
RURAL_MULTIPLIER = 1.0
HABITABILITY_EXPONENT = 0.6
FERTILITY_EXPONENT = 0.4

# Urban share of a cell's population, by cell type: (centre, amplitude, min, max)
URBAN_CELL_SHARE = (0.75, 0.10, 0.60, 0.90)
RURAL_CELL_SHARE = (0.10, 0.05, 0.02, 0.25)

DEFAULT_SEED = "TOI-700"
