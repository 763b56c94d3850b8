"""Configuration app package.

Stores the chalet's booking settings record (room price tables, bulk price
table, bulk booking limits), the seasonal restriction periods and their
access codes. Everything is schema-checked on load and on admin update and
handed to the booking engine as an immutable ``BookingSettings`` value.
"""
