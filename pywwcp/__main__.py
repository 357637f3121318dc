# pyWWCP Module - Command Line
# -*- coding: utf-8 -*-
"""
 Python module to project a WWCP e-mobility roaming network as JSON

 Command Line:
    python -m pywwcp [-debug] <get|status|set|version> -file network.json ...

"""

import argparse
import json
import os
import sys

# Modules
from pywwcp import RoamingNetworkAPI, set_debug, version
from pywwcp.exceptions import WWCPError
from pywwcp.status import StatusAxis

# Global Variables
network_file = os.getenv("WWCP_NETWORK_FILE", "network.json")

COLLECTIONS = ["operators", "pools", "stations", "evses", "groups", "brands", "tariffs"]
DETAILS = ["network", "operator", "pool", "station", "evse", "group", "brand", "tariff"]
KINDS = ["network", "operator", "pool", "station", "evse", "group", "brand", "tariff"]


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="pyWWCP", description=f"pyWWCP Module v{version}")
    subparsers = p.add_subparsers(dest="command", title='commands (run <command> -h to see usage information)',
                                  required=True)

    get_args = subparsers.add_parser("get", help='Print the JSON projection of an entity or collection')
    get_args.add_argument("resource", choices=COLLECTIONS + DETAILS, help="Collection or entity to project")
    get_args.add_argument("-id", type=str, default=None, help="Identifier of the entity (detail resources)")
    get_args.add_argument("-operator", type=str, default=None, help="Only entities of this operator")
    get_args.add_argument("-expand", type=str, default="", help="Relations to embed, e.g. chargingpools,-evses")
    get_args.add_argument("-include", type=str, default="", help="Relations to show as identifiers")
    get_args.add_argument("-skip", type=int, default=0, help="Items to skip [Default=0]")
    get_args.add_argument("-take", type=int, default=None, help="Items to return [Default=all]")

    status_args = subparsers.add_parser("status", help='Print status histories')
    status_args.add_argument("kind", choices=KINDS, help="Entity kind")
    status_args.add_argument("-id", type=str, default=None, help="Only the history of this entity")
    status_args.add_argument("-operator", type=str, default=None, help="Only entities of this operator")
    status_args.add_argument("-admin", action="store_true", default=False, help="Administrative status")
    status_args.add_argument("-historysize", type=int, default=None, help="Entries per entity [Default=1]")
    status_args.add_argument("-skip", type=int, default=0, help="Entities to skip [Default=0]")
    status_args.add_argument("-take", type=int, default=None, help="Entities to return [Default=all]")

    set_args = subparsers.add_parser("set", help='Set the status of an entity in memory and print its history '
                                                    '(the network file is not modified)')
    set_args.add_argument("-id", type=str, required=True, help="Identifier of the entity")
    set_args.add_argument("-newstatus", type=str, required=True, help="New status, e.g. OutOfService")
    set_args.add_argument("-admin", action="store_true", default=False, help="Administrative status")
    set_args.add_argument("-timestamp", type=str, default=None, help="ISO 8601 timestamp [Default=now]")

    subparsers.add_parser("version", help='Print version information')

    # Global flags
    p.add_argument("-debug", action="store_true", default=False, help="Enable debug output")
    p.add_argument("-file", type=str, default=network_file,
                   help=f"Roaming network JSON file [Default={network_file}]")
    return p


def load_api(filename: str) -> RoamingNetworkAPI:
    with open(filename, "r", encoding="utf-8") as f:
        data = json.load(f)
    return RoamingNetworkAPI.from_json(data)


def run(args) -> int:
    command = args.command

    if command == 'version':
        print("pyWWCP [%s]\n" % version)
        return 0

    try:
        api = load_api(args.file)
    except WWCPError as e:
        print(f"ERROR: {e.kind} - {e.description}")
        return 1
    except OSError as e:
        print(f"ERROR: Unable to read network file {args.file}: {e}")
        return 1
    except ValueError as e:
        print(f"ERROR: InvalidNetworkData - {args.file} is not valid JSON: {e}")
        return 1

    try:
        if command == 'get':
            params = {"expand": args.expand, "include": args.include}
            if args.resource == 'network':
                output = api.network_info(**params)
            elif args.resource in COLLECTIONS:
                method = getattr(api, args.resource)
                if args.resource == 'operators':
                    result = method(skip=args.skip, take=args.take, **params)
                else:
                    result = method(args.operator, skip=args.skip, take=args.take, **params)
                output = result.to_json()
            else:
                if not args.id:
                    print(f"ERROR: -id is required for {args.resource}")
                    return 1
                output = getattr(api, args.resource)(args.id, **params)

        elif command == 'status':
            axis = StatusAxis.ADMIN if args.admin else StatusAxis.OPERATIONAL
            params = {"historySize": args.historysize}
            if args.id:
                output = api.history(args.id, axis, **params)
            else:
                output = api.status(args.kind, args.operator, axis, skip=args.skip, take=args.take,
                                    **params).to_json()

        else:  # set
            axis = StatusAxis.ADMIN if args.admin else StatusAxis.OPERATIONAL
            body = {"newstatus": args.newstatus}
            if args.timestamp:
                body["timestamp"] = args.timestamp
            reply = api.apply_status_request(args.id, axis, body)
            if not reply.ok:
                print(f"ERROR: {reply.error_kind} - {reply.description}")
                return 1
            output = {"description": "OK", "appliedCount": reply.applied_count,
                      axis.value: api.history(args.id, axis)}
    except WWCPError as e:
        print(f"ERROR: {e.kind} - {e.description}")
        return 1
    finally:
        api.close()

    print(json.dumps(output, indent=4))
    return 0


def main(argv=None) -> int:
    p = build_parser()
    if argv is None and len(sys.argv) == 1:
        p.print_help(sys.stderr)
        return 1

    # parse args
    args = p.parse_args(argv)

    # Set Debug Mode
    if args.debug:
        set_debug(True)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
