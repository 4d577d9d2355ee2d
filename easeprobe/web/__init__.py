"""Web helpers: access logging and query parameter parsing."""