# Links are not a table: they live in groups.links (jsonb array)
# This file documents the expected document shape

"""
Expected link document (element of groups.links):

- id: text - client-generated uuid4
- url: text
- title: text
- description: text (may be empty)
- thumbnail: text (optional)
- author: text - author email, immutable
- "authorNickname": text - snapshot of the author's nickname, rewritten by the
  profile rename cascade only
- timestamp: bigint - epoch milliseconds
- votes: {"up": [email], "down": [email]} - an email is never in both
- comments: [comment]

comment:
- id: text - client-generated uuid4
- content: text (trimmed, non-empty)
- author: text
- "authorNickname": text - snapshot
- timestamp: bigint - epoch milliseconds
"""
