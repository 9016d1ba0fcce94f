from pascal_run.cli.commands import main

if __name__ == "__main__":
    main()

#############################
#
# Key design patterns used
# •	Composition Root: create_app() builds the orchestrator and all of its adapters.
# •	Dependency Injection (manual): services receive ports (ConfigStore, Editor, Prompter, TerminalFactory).
# •	Service Layer: RunOrchestrator owns the compile-and-run use case.
# •	Chain of Responsibility: CompilerLocator tries its lookup strategies in order.
# •	Repository: ArtifactRepository encapsulates executable and intermediate file handling.
# ________________________________________
# Layers
#    CLI (click)                      cli/commands.py
#    |
#    v
#    Services                         services/run_orchestrator.py, compiler_locator.py, command_builder.py
#    |
#    v
#    Ports                            ports/*.py (plain interfaces, no host API)
#    |
#    v
#    Adapters                         adapters/*.py, config/ini_config.py, repositories/*.py
#    |
#    v
#    External                         fpc, bash / PowerShell, the settings INI, the analytics endpoint
# ________________________________________
# Runtime flow for `pascal-run run hello.pas`
# •	validate hello.pas (line breaks, extension, exists, writable directory)
# •	resolve fpc: configured path -> PATH -> known install dirs -> ask the user
# •	kill a still-running hello, delete the stale hello executable
# •	build the shell script, send it to a new terminal session, start it
# •	optionally delete hello.o / hello.ppu / hello.compiled once the session ends
