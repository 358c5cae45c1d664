"""Protocol layer: upload planning, multipart orchestration, listing, ranges."""
