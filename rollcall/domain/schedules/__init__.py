"""
Schedules Domain

Date coordination: admins propose candidate dates, members answer through
a public token link, and the admin closes, decides or converts the
schedule into an attendance collection.

- state.py       status transitions (open / closed / decided / deleted)
- candidates.py  candidate reconciliation on edit
- service.py     create/update/close/decide/delete, public response submission
- router.py      admin and public endpoints
"""
