"""py-cgi — a small threaded HTTP server with a CGI/1.1 gateway.

The server answers each connection with exactly one response:

    listener → worker pool → connection pipeline → handler chain → wire

Static files are served from a document root; requests under the CGI
mount are handed to executable scripts through the Common Gateway
Interface (environment variables in, ``stdout`` out).
"""

__version__ = "0.1.0"
