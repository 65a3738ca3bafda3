import json
import sys

from astro_api.services.dates import datetime_string_to_jd
from astro_api.services.ephem import default_oracle
from astro_api.services.geo import geo_or_zero
from astro_api.services.lunar_phases import calc_moon_phases
from astro_api.services.polar_tracker import calc_transition_sets

USAGE = (
    "Usage: python cli.py sun <date> <lat,lng> [days]\n"
    "       python cli.py moon <date> <lat,lng> [cycles]"
)


def main(argv: list) -> int:
    if len(argv) < 3 or argv[0] not in {"sun", "moon"}:
        print(USAGE)
        return 1
    command, date_str, loc = argv[0], argv[1], argv[2]
    count = int(argv[3]) if len(argv) > 3 else (7 if command == "sun" else 1)
    jd = datetime_string_to_jd(date_str)
    geo = geo_or_zero(loc)
    oracle = default_oracle()

    if command == "sun":
        rows = calc_transition_sets(oracle, jd, count, geo)
        output = [row.as_dict(iso=True) for row in rows]
    else:
        output = [phase.as_dict() for phase in calc_moon_phases(oracle, jd, geo, count)]
    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
