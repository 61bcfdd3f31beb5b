from chainbuild.cli import main

raise SystemExit(main())
