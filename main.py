# -*- coding: utf-8 -*-
from scripts.batch_generate import run

if __name__ == '__main__':
    # python main.py prompts.json [--validate-only] [--verbose]
    run()
