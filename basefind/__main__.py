from basefind.cli import main

raise SystemExit(main())
