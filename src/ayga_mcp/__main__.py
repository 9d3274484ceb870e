from ayga_mcp.cli import main

main()
