#!/usr/bin/env python3
"""
Convert a Census county listing into the SAME location dataset.

Accepts either the comma separated national_county.txt
(``AL,01,001,Autauga County,H1``) or the newer pipe separated
national_county2020.txt (``STATE|STATEFP|COUNTYFP|COUNTYNS|COUNTYNAME|...``)
and writes ``0SSCCC,County,State`` rows.
"""

import argparse
import csv
import re
import sys
from pathlib import Path

SUFFIX_RE = re.compile(r'\s+(County|Parish|Borough|Census Area|Municipality|City and Borough)$')


def get_state_name(state_code: str) -> str:
    """Convert state abbreviation to full state name."""
    states = {
        'AL': 'Alabama', 'AK': 'Alaska', 'AZ': 'Arizona', 'AR': 'Arkansas',
        'CA': 'California', 'CO': 'Colorado', 'CT': 'Connecticut', 'DE': 'Delaware',
        'FL': 'Florida', 'GA': 'Georgia', 'HI': 'Hawaii', 'ID': 'Idaho',
        'IL': 'Illinois', 'IN': 'Indiana', 'IA': 'Iowa', 'KS': 'Kansas',
        'KY': 'Kentucky', 'LA': 'Louisiana', 'ME': 'Maine', 'MD': 'Maryland',
        'MA': 'Massachusetts', 'MI': 'Michigan', 'MN': 'Minnesota', 'MS': 'Mississippi',
        'MO': 'Missouri', 'MT': 'Montana', 'NE': 'Nebraska', 'NV': 'Nevada',
        'NH': 'New Hampshire', 'NJ': 'New Jersey', 'NM': 'New Mexico', 'NY': 'New York',
        'NC': 'North Carolina', 'ND': 'North Dakota', 'OH': 'Ohio', 'OK': 'Oklahoma',
        'OR': 'Oregon', 'PA': 'Pennsylvania', 'RI': 'Rhode Island', 'SC': 'South Carolina',
        'SD': 'South Dakota', 'TN': 'Tennessee', 'TX': 'Texas', 'UT': 'Utah',
        'VT': 'Vermont', 'VA': 'Virginia', 'WA': 'Washington', 'WV': 'West Virginia',
        'WI': 'Wisconsin', 'WY': 'Wyoming', 'DC': 'District of Columbia',
        'AS': 'American Samoa', 'GU': 'Guam', 'MP': 'Northern Mariana Islands',
        'PR': 'Puerto Rico', 'VI': 'U.S. Virgin Islands',
    }
    return states.get(state_code, state_code)


def parse_census_counties(census_file: Path, keep_suffix: bool = False) -> list:
    """Parse a Census county file into (code, county, state) rows."""
    rows = []

    with open(census_file, 'r', encoding='latin-1', newline='') as f:
        first = f.readline()
        delimiter = '|' if '|' in first else ','
        f.seek(0)

        reader = csv.reader(f, delimiter=delimiter)
        for fields in reader:
            if not fields or fields[0] == 'STATE':
                continue

            if delimiter == '|':
                state_abbr, state_fp, county_fp, county_name = fields[0], fields[1], fields[2], fields[4]
            else:
                state_abbr, state_fp, county_fp, county_name = fields[:4]

            if not (state_fp.isdigit() and county_fp.isdigit()):
                continue

            if not keep_suffix:
                county_name = SUFFIX_RE.sub('', county_name.strip())

            code = f"0{int(state_fp):02d}{int(county_fp):03d}"
            rows.append((code, county_name, get_state_name(state_abbr)))

    return rows


def main():
    """Main entry point."""
    repo_root = Path(__file__).parent.resolve().parent
    default_output = repo_root / 'src' / 'same_mesh_alerter' / 'data' / 'same_codes.csv'

    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument('census_file', type=Path, help='national_county.txt or national_county2020.txt')
    parser.add_argument('--output', '-o', type=Path, default=default_output)
    parser.add_argument('--keep-suffix', action='store_true',
                        help="Keep 'County', 'Parish' etc. in county names")
    args = parser.parse_args()

    if not args.census_file.exists():
        print(f"Error: {args.census_file} not found")
        return 1

    print(f"Parsing {args.census_file}...")
    rows = parse_census_counties(args.census_file, keep_suffix=args.keep_suffix)
    rows.sort()
    print(f"Found {len(rows)} counties")

    args.output.parent.mkdir(parents=True, exist_ok=True)
    with open(args.output, 'w', encoding='utf-8', newline='') as f:
        csv.writer(f, lineterminator='\n').writerows(rows)

    print(f"Wrote location codes to {args.output}")

    state_counts = {}
    for _, _, state in rows:
        state_counts[state] = state_counts.get(state, 0) + 1

    print("\nCounties by state:")
    for state in sorted(state_counts):
        print(f"  {state}: {state_counts[state]}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
