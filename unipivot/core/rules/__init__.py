"""
Pure business rules.

Modules in this package hold no database or HTTP code so they can be unit
tested directly:

- grades: member grades and permission checks
- attendance: check-in windows and attendance status
- deposits: deposit refund policies
- levels: badges, XP and levels
- identifiers: slugs and receipt numbers
- numbers: half-up rounding of rates and amounts
"""
