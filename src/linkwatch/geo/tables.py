"""Reference points for hostname geolocation.

Each place is listed once. US places are keyed ``"<name>,<state>"`` and
international ones ``"<name>"``, where ``<name>`` is the lowercased city
name with spaces and punctuation removed. The code tables only reference
these keys.
"""

# (city, state, latitude, longitude)
US_CITIES: tuple[tuple[str, str, float, float], ...] = (
    ("Birmingham", "AL", 33.519, -86.810),
    ("Anchorage", "AK", 61.218, -149.900),
    ("Phoenix", "AZ", 33.449, -112.074),
    ("Tucson", "AZ", 32.222, -110.975),
    ("Little Rock", "AR", 34.746, -92.290),
    ("Fremont", "CA", 37.548, -121.989),
    ("Fresno", "CA", 36.738, -119.787),
    ("Los Angeles", "CA", 34.052, -118.244),
    ("Mountain View", "CA", 37.386, -122.084),
    ("Oakland", "CA", 37.804, -122.271),
    ("Palo Alto", "CA", 37.442, -122.143),
    ("Sacramento", "CA", 38.582, -121.494),
    ("San Diego", "CA", 32.716, -117.161),
    ("San Francisco", "CA", 37.775, -122.418),
    ("San Jose", "CA", 37.339, -121.895),
    ("Santa Clara", "CA", 37.354, -121.955),
    ("Sunnyvale", "CA", 37.369, -122.036),
    ("Aurora", "CO", 39.729, -104.832),
    ("Denver", "CO", 39.739, -104.990),
    ("Englewood", "CO", 39.648, -104.988),
    ("Hartford", "CT", 41.764, -72.685),
    ("Washington", "DC", 38.907, -77.037),
    ("Wilmington", "DE", 39.740, -75.547),
    ("Boca Raton", "FL", 26.368, -80.128),
    ("Jacksonville", "FL", 30.332, -81.656),
    ("Miami", "FL", 25.762, -80.192),
    ("Orlando", "FL", 28.538, -81.379),
    ("Tampa", "FL", 27.951, -82.458),
    ("Atlanta", "GA", 33.749, -84.388),
    ("Honolulu", "HI", 21.307, -157.858),
    ("Boise", "ID", 43.615, -116.202),
    ("Chicago", "IL", 41.878, -87.630),
    ("Springfield", "IL", 39.782, -89.650),
    ("Indianapolis", "IN", 39.768, -86.158),
    ("Des Moines", "IA", 41.587, -93.625),
    ("Wichita", "KS", 37.687, -97.330),
    ("Louisville", "KY", 38.253, -85.759),
    ("Baton Rouge", "LA", 30.451, -91.187),
    ("New Orleans", "LA", 29.951, -90.072),
    ("Portland", "ME", 43.659, -70.257),
    ("Baltimore", "MD", 39.290, -76.612),
    ("Boston", "MA", 42.360, -71.059),
    ("Cambridge", "MA", 42.374, -71.106),
    ("Detroit", "MI", 42.331, -83.046),
    ("Grand Rapids", "MI", 42.963, -85.668),
    ("Minneapolis", "MN", 44.978, -93.265),
    ("Jackson", "MS", 32.299, -90.185),
    ("Kansas City", "MO", 39.100, -94.578),
    ("St. Louis", "MO", 38.627, -90.199),
    ("Billings", "MT", 45.783, -108.500),
    ("Omaha", "NE", 41.256, -95.934),
    ("Las Vegas", "NV", 36.169, -115.140),
    ("Reno", "NV", 39.530, -119.814),
    ("Manchester", "NH", 42.991, -71.464),
    ("Newark", "NJ", 40.736, -74.172),
    ("Piscataway", "NJ", 40.499, -74.399),
    ("Secaucus", "NJ", 40.790, -74.057),
    ("Albuquerque", "NM", 35.084, -106.650),
    ("Albany", "NY", 42.653, -73.756),
    ("Buffalo", "NY", 42.887, -78.879),
    ("New York", "NY", 40.713, -74.006),
    ("Rochester", "NY", 43.157, -77.616),
    ("Charlotte", "NC", 35.227, -80.843),
    ("Durham", "NC", 35.994, -78.899),
    ("Raleigh", "NC", 35.780, -78.639),
    ("Fargo", "ND", 46.877, -96.790),
    ("Cincinnati", "OH", 39.100, -84.512),
    ("Cleveland", "OH", 41.499, -81.694),
    ("Columbus", "OH", 39.962, -82.999),
    ("Dayton", "OH", 39.759, -84.192),
    ("Oklahoma City", "OK", 35.468, -97.516),
    ("Tulsa", "OK", 36.154, -95.993),
    ("Portland", "OR", 45.505, -122.675),
    ("Philadelphia", "PA", 39.953, -75.164),
    ("Pittsburgh", "PA", 40.441, -79.996),
    ("Providence", "RI", 41.824, -71.413),
    ("Columbia", "SC", 34.000, -81.035),
    ("Sioux Falls", "SD", 43.545, -96.731),
    ("Memphis", "TN", 35.150, -90.049),
    ("Nashville", "TN", 36.163, -86.781),
    ("Austin", "TX", 30.267, -97.743),
    ("Dallas", "TX", 32.777, -96.797),
    ("El Paso", "TX", 31.762, -106.485),
    ("Fort Worth", "TX", 32.755, -97.331),
    ("Houston", "TX", 29.760, -95.370),
    ("Irving", "TX", 32.814, -96.949),
    ("Plano", "TX", 33.020, -96.699),
    ("San Antonio", "TX", 29.425, -98.495),
    ("Salt Lake City", "UT", 40.761, -111.891),
    ("Burlington", "VT", 44.476, -73.212),
    ("Ashburn", "VA", 39.044, -77.487),
    ("Herndon", "VA", 38.970, -77.386),
    ("Reston", "VA", 38.969, -77.341),
    ("Richmond", "VA", 37.541, -77.436),
    ("Seattle", "WA", 47.606, -122.332),
    ("Spokane", "WA", 47.659, -117.426),
    ("Tacoma", "WA", 47.253, -122.444),
    ("Charleston", "WV", 38.350, -81.633),
    ("Madison", "WI", 43.073, -89.401),
    ("Milwaukee", "WI", 43.039, -87.907),
    ("Cheyenne", "WY", 41.140, -104.820),
)

# (city, country, latitude, longitude)
INTL_CITIES: tuple[tuple[str, str, float, float], ...] = (
    ("Amsterdam", "Netherlands", 52.370, 4.895),
    ("Brussels", "Belgium", 50.850, 4.352),
    ("Copenhagen", "Denmark", 55.676, 12.569),
    ("Dublin", "Ireland", 53.350, -6.260),
    ("Frankfurt", "Germany", 50.110, 8.682),
    ("Helsinki", "Finland", 60.170, 24.938),
    ("Hong Kong", "Hong Kong", 22.320, 114.169),
    ("Lisbon", "Portugal", 38.722, -9.139),
    ("London", "United Kingdom", 51.507, -0.128),
    ("Madrid", "Spain", 40.417, -3.704),
    ("Marseille", "France", 43.296, 5.370),
    ("Mexico City", "Mexico", 19.433, -99.133),
    ("Milan", "Italy", 45.464, 9.190),
    ("Montreal", "Canada", 45.502, -73.567),
    ("Munich", "Germany", 48.137, 11.576),
    ("Osaka", "Japan", 34.694, 135.502),
    ("Oslo", "Norway", 59.914, 10.752),
    ("Paris", "France", 48.857, 2.352),
    ("Prague", "Czech Republic", 50.075, 14.437),
    ("Sao Paulo", "Brazil", -23.551, -46.633),
    ("Seoul", "South Korea", 37.566, 126.978),
    ("Singapore", "Singapore", 1.352, 103.820),
    ("Stockholm", "Sweden", 59.329, 18.069),
    ("Sydney", "Australia", -33.869, 151.209),
    ("Tokyo", "Japan", 35.682, 139.692),
    ("Toronto", "Canada", 43.653, -79.383),
    ("Vancouver", "Canada", 49.283, -123.121),
    ("Vienna", "Austria", 48.208, 16.372),
    ("Warsaw", "Poland", 52.230, 21.012),
    ("Zurich", "Switzerland", 47.377, 8.540),
)

# The 50 states plus DC
US_STATES: frozenset[str] = frozenset(
    "al ak az ar ca co ct dc de fl ga hi id il in ia ks ky la me md ma mi mn ms mo "
    "mt ne nv nh nj nm ny nc nd oh ok or pa ri sc sd tn tx ut vt va wa wv wi wy".split()
)

# CLLI place codes: the first four characters of a CLLI facility code
CLLI_CODES: dict[str, str] = {
    "asbn": "ashburn,va",
    "atln": "atlanta,ga",
    "atlx": "atlanta,ga",
    "ausn": "austin,tx",
    "bflo": "buffalo,ny",
    "bltm": "baltimore,md",
    "bstn": "boston,ma",
    "chcg": "chicago,il",
    "chrl": "charlotte,nc",
    "cinc": "cincinnati,oh",
    "clev": "cleveland,oh",
    "clmb": "columbus,oh",
    "denv": "denver,co",
    "dlls": "dallas,tx",
    "dllx": "dallas,tx",
    "dtrt": "detroit,mi",
    "hstn": "houston,tx",
    "hstx": "houston,tx",
    "jcsn": "jacksonville,fl",
    "jcvl": "jacksonville,fl",
    "kscy": "kansascity,mo",
    "lsan": "losangeles,ca",
    "lsvg": "lasvegas,nv",
    "lsvn": "lasvegas,nv",
    "miam": "miami,fl",
    "milw": "milwaukee,wi",
    "mnps": "minneapolis,mn",
    "nsvl": "nashville,tn",
    "nwrk": "newark,nj",
    "nycm": "newyork,ny",
    "okcy": "oklahomacity,ok",
    "omah": "omaha,ne",
    "phla": "philadelphia,pa",
    "phnx": "phoenix,az",
    "pitt": "pittsburgh,pa",
    "plal": "paloalto,ca",
    "ptld": "portland,or",
    "rlgh": "raleigh,nc",
    "rstn": "reston,va",
    "sant": "sanantonio,tx",
    "scrm": "sacramento,ca",
    "slkc": "saltlakecity,ut",
    "sndg": "sandiego,ca",
    "snfc": "sanfrancisco,ca",
    "snjs": "sanjose,ca",
    "snjx": "sanjose,ca",
    "sntc": "santaclara,ca",
    "stls": "stlouis,mo",
    "sttl": "seattle,wa",
    "tamp": "tampa,fl",
    "wash": "washington,dc",
}

# IATA airport codes plus the informal city abbreviations carriers use
IATA_CODES: dict[str, str] = {
    # US
    "atl": "atlanta,ga",
    "aus": "austin,tx",
    "bna": "nashville,tn",
    "bos": "boston,ma",
    "bwi": "baltimore,md",
    "cle": "cleveland,oh",
    "clt": "charlotte,nc",
    "cmh": "columbus,oh",
    "cvg": "cincinnati,oh",
    "dca": "washington,dc",
    "den": "denver,co",
    "dfw": "dallas,tx",
    "dtw": "detroit,mi",
    "ewr": "newark,nj",
    "iad": "washington,dc",
    "iah": "houston,tx",
    "ind": "indianapolis,in",
    "jax": "jacksonville,fl",
    "jfk": "newyork,ny",
    "las": "lasvegas,nv",
    "lax": "losangeles,ca",
    "mci": "kansascity,mo",
    "mia": "miami,fl",
    "mke": "milwaukee,wi",
    "msp": "minneapolis,mn",
    "msy": "neworleans,la",
    "oma": "omaha,ne",
    "ord": "chicago,il",
    "pdx": "portland,or",
    "phl": "philadelphia,pa",
    "phx": "phoenix,az",
    "pit": "pittsburgh,pa",
    "rdu": "raleigh,nc",
    "san": "sandiego,ca",
    "sat": "sanantonio,tx",
    "sea": "seattle,wa",
    "sfo": "sanfrancisco,ca",
    "sjc": "sanjose,ca",
    "slc": "saltlakecity,ut",
    "stl": "stlouis,mo",
    "tpa": "tampa,fl",
    "chi": "chicago,il",
    "nyc": "newyork,ny",
    "dal": "dallas,tx",
    "hou": "houston,tx",
    "was": "washington,dc",
    # International
    "ams": "amsterdam",
    "arn": "stockholm",
    "bru": "brussels",
    "cdg": "paris",
    "cph": "copenhagen",
    "dub": "dublin",
    "fra": "frankfurt",
    "gru": "saopaulo",
    "hel": "helsinki",
    "hkg": "hongkong",
    "icn": "seoul",
    "kix": "osaka",
    "lhr": "london",
    "lis": "lisbon",
    "lon": "london",
    "mad": "madrid",
    "mex": "mexicocity",
    "mil": "milan",
    "mrs": "marseille",
    "muc": "munich",
    "nrt": "tokyo",
    "osl": "oslo",
    "par": "paris",
    "prg": "prague",
    "sao": "saopaulo",
    "sin": "singapore",
    "sto": "stockholm",
    "syd": "sydney",
    "tyo": "tokyo",
    "vie": "vienna",
    "waw": "warsaw",
    "yul": "montreal",
    "yvr": "vancouver",
    "yyz": "toronto",
    "zrh": "zurich",
}

# City names distinctive enough to trust without a state qualifier
STANDALONE_CITIES: tuple[str, ...] = (
    "atlanta,ga",
    "austin,tx",
    "baltimore,md",
    "boston,ma",
    "buffalo,ny",
    "charlotte,nc",
    "chicago,il",
    "cincinnati,oh",
    "cleveland,oh",
    "columbus,oh",
    "dallas,tx",
    "denver,co",
    "detroit,mi",
    "fortworth,tx",
    "houston,tx",
    "indianapolis,in",
    "jacksonville,fl",
    "kansascity,mo",
    "lasvegas,nv",
    "losangeles,ca",
    "miami,fl",
    "milwaukee,wi",
    "minneapolis,mn",
    "nashville,tn",
    "newark,nj",
    "neworleans,la",
    "newyork,ny",
    "oklahomacity,ok",
    "omaha,ne",
    "orlando,fl",
    "philadelphia,pa",
    "phoenix,az",
    "pittsburgh,pa",
    "portland,or",
    "raleigh,nc",
    "sacramento,ca",
    "saltlakecity,ut",
    "sanantonio,tx",
    "sandiego,ca",
    "sanfrancisco,ca",
    "sanjose,ca",
    "seattle,wa",
    "tampa,fl",
    "washington,dc",
    "amsterdam",
    "frankfurt",
    "london",
    "paris",
    "singapore",
    "stockholm",
    "sydney",
    "tokyo",
    "toronto",
    "vancouver",
    "zurich",
)
