"""Layout constants for the city viewer."""

TILE_SIZE = 28
MAP_W = 20
MAP_H = 20
GRID_W = MAP_W * TILE_SIZE
GRID_H = MAP_H * TILE_SIZE
SIDEBAR_W = 220
STATUS_H = 32
SCREEN_W = GRID_W + SIDEBAR_W
SCREEN_H = GRID_H + STATUS_H
FPS = 30

# (type_id, label, color); order matches number keys 1..n
BUILDINGS: list[tuple[str, str, tuple[int, int, int]]] = [
    ("Road", "Road", (160, 160, 160)),
    ("SuburbanHome", "Home", (90, 170, 90)),
    ("ModernApartment", "Apartment", (60, 130, 200)),
    ("CornerShop", "Shop", (220, 170, 60)),
    ("GasStation", "Gas", (200, 90, 60)),
    ("PoliceStation", "Police", (70, 70, 200)),
    ("CityPark", "Park", (40, 200, 120)),
    ("MegaMall", "Mall", (200, 60, 200)),
]

COLORS_BY_TYPE = {type_id: color for type_id, _, color in BUILDINGS}
