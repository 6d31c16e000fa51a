#!/usr/bin/env python3
# -*- coding: UTF-8 -*-
from tokenledger.cli import ledger_run

if __name__ == "__main__":
    ledger_run._parse_cli_args()
