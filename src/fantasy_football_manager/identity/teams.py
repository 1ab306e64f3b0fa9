"""NFL team, name-suffix and position lookup tables.

Every table here is read-only data. ``Normalizer`` copies them into immutable
mappings at construction time, so alternative tables can be supplied in tests
without touching these defaults.
"""

from types import MappingProxyType

# Canonical abbreviation -> every abbreviation variant seen across providers.
# The canonical form is always listed first.
NFL_TEAM_VARIANTS: MappingProxyType[str, tuple[str, ...]] = MappingProxyType(
    {
        "ARI": ("ARI", "ARZ"),
        "ATL": ("ATL",),
        "BAL": ("BAL",),
        "BUF": ("BUF",),
        "CAR": ("CAR",),
        "CHI": ("CHI",),
        "CIN": ("CIN",),
        "CLE": ("CLE",),
        "DAL": ("DAL",),
        "DEN": ("DEN",),
        "DET": ("DET",),
        "GB": ("GB", "GBP"),
        "HOU": ("HOU",),
        "IND": ("IND",),
        "JAX": ("JAX", "JAC"),
        "KC": ("KC", "KCC"),
        "LAC": ("LAC", "SD", "SDC"),
        "LAR": ("LAR", "LA", "STL"),
        "LV": ("LV", "OAK", "LVR"),
        "MIA": ("MIA",),
        "MIN": ("MIN",),
        "NE": ("NE", "NEP"),
        "NO": ("NO", "NOS"),
        "NYG": ("NYG",),
        "NYJ": ("NYJ",),
        "PHI": ("PHI",),
        "PIT": ("PIT",),
        "SF": ("SF", "SFO"),
        "SEA": ("SEA",),
        "TB": ("TB", "TBB"),
        "TEN": ("TEN",),
        "WAS": ("WAS", "WSH"),
    }
)

# Canonical abbreviation -> full, city-prefixed and historical franchise names.
NFL_TEAM_NAMES: MappingProxyType[str, tuple[str, ...]] = MappingProxyType(
    {
        "ARI": ("Arizona Cardinals", "Arizona"),
        "ATL": ("Atlanta Falcons", "Atlanta"),
        "BAL": ("Baltimore Ravens", "Baltimore"),
        "BUF": ("Buffalo Bills", "Buffalo"),
        "CAR": ("Carolina Panthers", "Carolina"),
        "CHI": ("Chicago Bears", "Chicago"),
        "CIN": ("Cincinnati Bengals", "Cincinnati"),
        "CLE": ("Cleveland Browns", "Cleveland"),
        "DAL": ("Dallas Cowboys", "Dallas"),
        "DEN": ("Denver Broncos", "Denver"),
        "DET": ("Detroit Lions", "Detroit"),
        "GB": ("Green Bay Packers", "Green Bay"),
        "HOU": ("Houston Texans", "Houston"),
        "IND": ("Indianapolis Colts", "Indianapolis"),
        "JAX": ("Jacksonville Jaguars", "Jacksonville"),
        "KC": ("Kansas City Chiefs", "Kansas City"),
        "LAC": ("Los Angeles Chargers", "LA Chargers", "San Diego Chargers"),
        "LAR": ("Los Angeles Rams", "LA Rams", "St. Louis Rams"),
        "LV": ("Las Vegas Raiders", "Las Vegas", "Oakland Raiders"),
        "MIA": ("Miami Dolphins", "Miami"),
        "MIN": ("Minnesota Vikings", "Minnesota"),
        "NE": ("New England Patriots", "New England"),
        "NO": ("New Orleans Saints", "New Orleans"),
        "NYG": ("New York Giants", "NY Giants"),
        "NYJ": ("New York Jets", "NY Jets"),
        "PHI": ("Philadelphia Eagles", "Philadelphia"),
        "PIT": ("Pittsburgh Steelers", "Pittsburgh"),
        "SF": ("San Francisco 49ers", "San Francisco"),
        "SEA": ("Seattle Seahawks", "Seattle"),
        "TB": ("Tampa Bay Buccaneers", "Tampa Bay"),
        "TEN": ("Tennessee Titans", "Tennessee"),
        "WAS": (
            "Washington Commanders",
            "Washington",
            "Washington Football Team",
            "Washington Redskins",
        ),
    }
)

GENERATIONAL_SUFFIXES: frozenset[str] = frozenset(
    {"II", "III", "IV", "V", "Jr", "Jr.", "Sr", "Sr.", "Junior", "Senior"}
)

# Provider-specific spellings of the same position.
POSITION_ALIASES: MappingProxyType[str, str] = MappingProxyType(
    {
        "DEF": "DST",
        "D/ST": "DST",
        "DST": "DST",
        "PK": "K",
    }
)

# ESPN numeric ids used in roster payloads.
ESPN_PRO_TEAM_IDS: MappingProxyType[int, str] = MappingProxyType(
    {
        1: "ATL", 2: "BUF", 3: "CHI", 4: "CIN", 5: "CLE", 6: "DAL", 7: "DEN", 8: "DET",
        9: "GB", 10: "TEN", 11: "IND", 12: "KC", 13: "LV", 14: "LAR", 15: "MIA", 16: "MIN",
        17: "NE", 18: "NO", 19: "NYG", 20: "NYJ", 21: "PHI", 22: "ARI", 23: "PIT", 24: "LAC",
        25: "SF", 26: "SEA", 27: "TB", 28: "WAS", 29: "CAR", 30: "JAX", 33: "BAL", 34: "HOU",
    }
)  # fmt: skip

ESPN_POSITION_IDS: MappingProxyType[int, str] = MappingProxyType(
    {1: "QB", 2: "RB", 3: "WR", 4: "TE", 5: "K", 16: "DEF"}
)
