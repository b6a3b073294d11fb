# depserver

Tools for tracking upstream releases of build dependencies, plus a small
HTTP service that hands out the dependency metadata kept in a bucket.

The package does two jobs:

* **Upstream discovery.** For each supported dependency it lists every
  released version, newest first, and works out the details of a single
  version: download URI, SHA-256 checksum, release date, deprecation date
  and CPE identifier.
* **Metadata service.** A WSGI application answers
  `GET /v1/dependency?name=<dependency>` by fetching
  `<bucket-url>/metadata/<name>.json` and returning its contents.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Supported dependencies

| Class | Module | Source of release data |
| --- | --- | --- |
| `Bundler` | `depserver.bundler` | rubygems.org version index |
| `CAAPM` | `depserver.caapm` | CA APM agent index on Bintray |
| `Composer` | `depserver.composer` | GitHub releases and getcomposer.org checksums |
| `Curl` | `depserver.curl` | curl.se release table |
| `DotnetASPNETCore` | `depserver.dotnet` | .NET release metadata (ASP.NET Core runtime) |
| `DotnetRuntime` | `depserver.dotnet` | .NET release metadata (runtime) |

## Using the library

Each dependency class is a dataclass whose fields are the collaborators
that do the actual I/O. Their interfaces are the protocols in
`depserver.models`: `Checksummer`, `FileSystem`, `GithubClient` and
`WebClient`. Pass in your own implementations, or test doubles:

```python
from depserver.curl import Curl

curl = Curl(checksummer=checksummer, web_client=web_client)

for version in curl.get_all_version_refs():
    print(version)

dep_version = curl.get_dependency_version("7.73.0")
print(dep_version.uri, dep_version.sha256, dep_version.release_date)
print(dep_version.to_json())
```

The fields each class takes:

* `Bundler`, `CAAPM`: `checksummer`, `file_system`, `web_client`
* `Composer`: `checksummer`, `file_system`, `github_client`, `web_client`
* `Curl`, `DotnetASPNETCore`, `DotnetRuntime`: `checksummer`, `web_client`

Every dependency offers the same three methods, described by the
`Dependency` protocol:

| Method | Returns |
| --- | --- |
| `get_all_version_refs()` | list of version strings, newest first |
| `get_dependency_version(version)` | a `DepVersion` |
| `get_release_date(version)` | the release date as a `datetime` |

Some particulars:

* `Bundler` lists only versions of the form `X.Y.Z`; `Composer` and the
  .NET classes leave out pre-releases.
* `CAAPM.get_release_date` always raises, as the index carries no dates.
* The .NET classes return `None` from `get_release_date` when the version
  is not in its channel, pick the `linux-x64` archive (falling back to
  `ubuntu-x64`), and set `deprecation_date` from the channel's end-of-life
  date.
* `Curl` verifies the signature of releases newer than 7.29.0 through the
  checksummer, and uses the archive download location for releases older
  than 7.30.0.

Failures are raised as `DependencyError`. When a .NET release carries no
Linux x64 archive, `NoSourceCodeError` (a subclass) is raised instead.

`DepVersion.to_dict()` and `DepVersion.to_json()` produce the metadata
record with the keys `version`, `uri`, `sha256`, `release_date`,
`deprecation_date` and `cpe`; the two date keys are left out when no date
is known, and dates are written in RFC 3339 form.

### Version ordering

`depserver.versions.parse_version` parses semantic versions (a leading `v`
and a missing minor or patch part are accepted) into comparable `Version`
objects, and raises `InvalidVersionError` for anything else.

## Running the metadata server

```
depserver-server --bucket-url https://bucket.example.com
```

The server listens on the port named by the `PORT` environment variable,
or 8080 when it is unset. `--bucket-url` defaults to
`https://deps.paketo.io`.

Responses on `/v1/dependency`:

* `200` with the metadata file's body when the bucket has it. The
  dependency name is lower-cased before the lookup.
* `400` when the `name` parameter is missing.
* `405` for any method other than `GET`.
* `500` when the bucket cannot be reached or does not return the file.

Error bodies have the form `{"error": "<message>"}`. Any other path gets
`404`.

`depserver.handler.Handler` is a plain WSGI application, so it can also be
mounted in any WSGI server of your choice. Its `dependency_handler(method,
query)` method returns the status code and body directly.

## What the package does not do

* There is no lookup of a dependency by name: you choose and construct the
  dependency class yourself.
* There are no command-line tools for listing new upstream versions or
  printing a version's metadata; the only command is the metadata server.
* No working `Checksummer`, `FileSystem`, `GithubClient` or `WebClient`
  is included. The package defines their interfaces only, so downloading,
  hashing and signature checking depend on the implementations you supply.