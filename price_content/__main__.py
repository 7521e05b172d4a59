from price_content.server import main

main()
