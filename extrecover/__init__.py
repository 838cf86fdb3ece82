# extrecover — File Extension Recovery
# Restores missing or wrong extensions from file content alone.
#
# Architecture (bottom → top):
#   signatures — Ordered magic-number rule table + classify()
#   manager    — Folder pass: read header, classify, append extension
